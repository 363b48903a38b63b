"""Character, state and premise editing on a key's revision content."""

from typing import List

from sqlalchemy.orm import Session

from keybuilder.exceptions import NotFoundError, ValidationFailedError
from keybuilder.models.entity import Character as CharacterRow
from keybuilder.models.entity import CharacterState
from keybuilder.models.user import User
from keybuilder.schemas.character import (
    Alternative,
    CharacterCreate,
    CharacterDelete,
    CharacterInput,
    CharacterUpdate,
    PremiseStatesRemoval,
    PremiseUpdate,
    StateCreate,
)
from keybuilder.schemas.content import Character, LocalizedText, NumericalState, State
from keybuilder.services import character_rules, revision_service

NUMERICAL = "NUMERICAL"
MULTISTATE = "MULTISTATE"
EXCLUSIVE = "EXCLUSIVE"


def _validate_input(data: CharacterInput) -> None:
    if data.is_numerical:
        if not (data.unit_no or data.unit_en):
            raise ValidationFailedError("Missing input: unitNo or unitEn")
        if data.min is None or data.max is None or data.step_size is None:
            raise ValidationFailedError("Missing input: min, max and stepSize")
        if data.min > data.max:
            raise ValidationFailedError("min is greater than max")
    elif not data.alternatives or len(data.alternatives) < 2:
        raise ValidationFailedError("Missing input: at least two alternatives")


def _get_character_row(db: Session, character_id: str) -> CharacterRow:
    row = None
    if str(character_id).isdigit():
        row = db.query(CharacterRow).filter(CharacterRow.character_id == int(character_id)).first()
    if not row:
        raise NotFoundError("Character not found")
    return row


def build_multi_states(db: Session, character_id: int, alternatives: List[Alternative]) -> List[State]:
    """Claim the pre-created state rows for ``character_id`` and build the ordered state list.

    Every alternative is resolved before any row is claimed.
    """
    rows = []
    for alternative in alternatives:
        state_row = None
        if str(alternative.id).isdigit():
            state_row = db.query(CharacterState).filter(CharacterState.state_id == int(alternative.id)).first()
        if state_row is None:
            raise NotFoundError(f"State {alternative.id} not found")
        rows.append(state_row)

    states = []
    for alternative, state_row in zip(alternatives, rows):
        state_row.character_id = character_id
        title = alternative.title or LocalizedText()
        description = alternative.description or LocalizedText()
        states.append(State(
            id=str(state_row.state_id),
            title=LocalizedText.from_pair(title.no, title.en),
            description=LocalizedText.from_pair(description.no, description.en),
            media=[str(media_id) for media_id in alternative.media] if alternative.media is not None else None,
        ))
    return states


def build_numerical_state(db: Session, character_id: int, data: CharacterInput, state_id=None) -> NumericalState:
    """Find or create the state row backing a numerical range; a missing or 0 id creates one."""
    state_row = None
    if state_id and str(state_id).isdigit() and int(state_id) != 0:
        state_row = db.query(CharacterState).filter(CharacterState.state_id == int(state_id)).first()
    if state_row is None:
        state_row = CharacterState(character_id=character_id)
        db.add(state_row)
        db.flush()
    return NumericalState(
        id=str(state_row.state_id),
        unit=LocalizedText.from_pair(data.unit_no, data.unit_en),
        min=data.min,
        max=data.max,
        step_size=data.step_size,
    )


def create_character(db: Session, data: CharacterCreate, user: User) -> dict:
    _validate_input(data)
    revision, key = revision_service.find_revision_for_key(db, data.revision_id, data.key_id)
    content, media = revision_service.load_documents(revision)

    row_type = NUMERICAL if data.is_numerical else (EXCLUSIVE if data.type.upper() == EXCLUSIVE else MULTISTATE)
    row = CharacterRow(key_id=key.key_id, type=row_type)
    db.add(row)
    db.flush()
    if data.is_numerical:
        states = build_numerical_state(db, row.character_id, data)
    else:
        states = build_multi_states(db, row.character_id, data.alternatives)
        for state in states:
            state.media = None

    character = Character(id=str(row.character_id), type=row_type.lower(), states=states)
    character_rules.set_character_info(
        character,
        title_no=data.title_no,
        title_en=data.title_en,
        description_no=data.description_no,
        description_en=data.description_en,
    )
    content.characters.append(character)
    revision_id = revision_service.save_documents(
        db, key, revision, content, media, user, f"Created new character: {data.label()}"
    )
    return {"revision_id": revision_id, "character_id": character.id}


def update_character(db: Session, character_id: str, data: CharacterUpdate, user: User) -> str:
    _validate_input(data)
    revision, key = revision_service.find_revision_for_key(db, data.revision_id, data.key_id)
    content, media = revision_service.load_documents(revision)
    _get_character_row(db, character_id)
    character = content.find_character(str(character_id))
    if character is None:
        raise NotFoundError("Character is not part of this revision")

    character_rules.set_character_info(
        character,
        title_no=data.title_no,
        title_en=data.title_en,
        description_no=data.description_no,
        description_en=data.description_en,
    )
    if character.is_numerical:
        if not data.is_numerical:
            raise ValidationFailedError("Numerical characters need min, max and stepSize")
        states = build_numerical_state(db, int(character.id), data, state_id=character.states.id)
        content.characters = character_rules.check_min_max_values(
            character.id, states, character.states, content.characters
        )
        character.states = states
    else:
        if not data.alternatives or len(data.alternatives) < 2:
            raise ValidationFailedError("Missing input: at least two alternatives")
        states = build_multi_states(db, int(character.id), data.alternatives)
        for state in states:
            if state.media is None:
                previous = character.find_state(state.id)
                state.media = previous.media if previous is not None else None
        if content.statements is not None and _states_differ(character.states, states):
            removed = set(character_rules.removed_state_ids(character, states))
            content.statements = character_rules.remove_statements_for_states(content.statements, removed)
        character.states = states

    return revision_service.save_documents(
        db, key, revision, content, media, user, f"Updated character: {data.label()}"
    )


def _dump_states(states: List[State]) -> list:
    return [state.model_dump(by_alias=True, exclude_none=True) for state in states]


def _states_differ(previous: List[State], states: List[State]) -> bool:
    return _dump_states(previous) != _dump_states(states)


def delete_character(db: Session, character_id: str, data: CharacterDelete, user: User) -> str:
    revision, key = revision_service.find_revision_for_key(db, data.revision_id, data.key_id)
    content, media = revision_service.load_documents(revision)
    character = content.find_character(str(character_id))
    if character is None:
        raise NotFoundError("Character is not part of this revision")
    content.characters = [char for char in content.characters if char.id != character.id]
    content.characters = character_rules.remove_character_premises(character.id, content.characters)
    content.statements = character_rules.remove_statements_for_character(content.statements, character)
    return revision_service.save_documents(
        db, key, revision, content, media, user, f"Deleted character: {character.label()}"
    )


def set_premise(db: Session, character_id: str, data: PremiseUpdate, user: User) -> str:
    revision, key = revision_service.find_revision_for_key(db, data.revision_id, data.key_id)
    content, media = revision_service.load_documents(revision)
    _get_character_row(db, character_id)
    character = content.find_character(str(character_id))
    if character is None:
        raise NotFoundError("Character is not part of this revision")
    character.logical_premise = data.logical_premise
    return revision_service.save_documents(
        db, key, revision, content, media, user, f"Updated character premise: {character.label()}"
    )


def remove_premise_states(db: Session, revision_id: str, data: PremiseStatesRemoval, user: User) -> str:
    """Strip removed states from every premise of a revision, in place unless already accepted."""
    revision, key = revision_service.find_revision_for_key(db, revision_id, data.key_id)
    content, media = revision_service.load_documents(revision)
    if not content.characters:
        raise NotFoundError("Revision has no characters")
    content.characters = character_rules.remove_states_from_premises(
        [str(state_id) for state_id in data.states], content.characters
    )
    return revision_service.save_in_place_or_branch(
        db, key, revision, content, media, user, "Removed states from character premises"
    )


def create_state(db: Session, data: StateCreate) -> int:
    state = CharacterState(character_id=data.character_id)
    db.add(state)
    db.commit()
    db.refresh(state)
    return state.state_id
