"""Editing rules for characters, their states and the logical premises that reference them."""

from typing import Iterable, List, Optional, Set

from keybuilder.schemas.content import Character, LocalizedText, NumericalState, PremiseClause, Statement


def set_character_info(
    character: Character,
    title_no: Optional[str] = None,
    title_en: Optional[str] = None,
    description_no: Optional[str] = None,
    description_en: Optional[str] = None,
) -> Character:
    """Overwrite only the provided, non-empty title and description values."""
    if character.title is None:
        character.title = LocalizedText()
    if character.description is None:
        character.description = LocalizedText()
    if title_no:
        character.title.no = title_no
    if title_en:
        character.title.en = title_en
    if description_no:
        character.description.no = description_no
    if description_en:
        character.description.en = description_en
    return character


def _prune(
    premise: List[List[PremiseClause]],
    keep,
) -> List[List[PremiseClause]]:
    filtered = [[clause for clause in disjunction if keep(clause)] for disjunction in premise]
    # a disjunction of one clause carries no alternative
    return [disjunction for disjunction in filtered if len(disjunction) > 1]


def remove_state_premises(state_id: str, characters: List[Character]) -> List[Character]:
    """Drop clauses naming ``state_id`` from every character's premise.

    A premise left with a single disjunction is cleared entirely.
    """
    state_id = str(state_id)
    for character in characters:
        if character.logical_premise is None:
            continue
        pruned = _prune(character.logical_premise, lambda clause: clause.state_id != state_id)
        character.logical_premise = None if len(pruned) == 1 else pruned
    return characters


def remove_states_from_premises(state_ids: Iterable[str], characters: List[Character]) -> List[Character]:
    """Apply ``remove_state_premises`` for each id, in order."""
    for state_id in state_ids:
        characters = remove_state_premises(state_id, characters)
    return characters


def remove_character_premises(character_id: str, characters: List[Character]) -> List[Character]:
    """Drop clauses naming ``character_id``.

    Unlike state removal, a premise left with one disjunction is kept.
    """
    character_id = str(character_id)
    for character in characters:
        if character.logical_premise is None:
            continue
        character.logical_premise = _prune(
            character.logical_premise, lambda clause: clause.character_id != character_id
        )
    return characters


def check_min_max_values(
    character_id: str,
    new_values: NumericalState,
    existing_values: NumericalState,
    characters: List[Character],
) -> List[Character]:
    """Purge premises referencing a numerical character whose range changed.

    Triggered by a step size change, a raised minimum, or an existing maximum
    greater than the new one.
    """
    if (
        existing_values.step_size != new_values.step_size
        or existing_values.min < new_values.min
        or existing_values.max > new_values.max
    ):
        characters = remove_character_premises(character_id, characters)
    return characters


def build_state_title(title: Optional[LocalizedText]) -> Optional[LocalizedText]:
    if title is None:
        return None
    return LocalizedText.from_pair(title.no, title.en)


def removed_state_ids(previous: Character, states: list) -> List[str]:
    """Ids of list states present in ``previous`` but absent from ``states``."""
    if previous.is_numerical:
        return []
    remaining = {state.id for state in states}
    return [state.id for state in previous.states if state.id not in remaining]


def remove_statements_for_states(
    statements: Optional[List[Statement]],
    state_ids: Set[str],
) -> Optional[List[Statement]]:
    if statements is None:
        return None
    return [statement for statement in statements if statement.state not in state_ids]


def remove_statements_for_character(
    statements: Optional[List[Statement]],
    character: Character,
) -> Optional[List[Statement]]:
    if statements is None:
        return None
    if character.is_numerical:
        state_ids = {character.states.id}
    else:
        state_ids = {state.id for state in character.states}
    return [
        statement
        for statement in statements
        if statement.character_id != character.id and statement.state not in state_ids
    ]
