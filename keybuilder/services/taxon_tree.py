"""Taxon tree operations on a revision content document.

Parent links are never stored in the tree. When an operation needs to know a
node's parent it builds a ``TaxonIndex`` over the current tree and discards it
afterwards.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set, Union

from keybuilder.schemas.content import LocalizedText, Statement, Taxon

ROOT_PARENT_ID = 0

TaxonId = Union[int, str]


@dataclass
class TaxonEntry:
    node: Taxon
    parent: Optional[Taxon]
    siblings: List[Taxon]


class TaxonIndex:
    """Id -> (node, parent, sibling list) lookup for one tree snapshot."""

    def __init__(self, tree: List[Taxon]):
        self.tree = tree
        self._entries: Dict[str, TaxonEntry] = {}
        self._index(tree, None)

    def _index(self, nodes: List[Taxon], parent: Optional[Taxon]) -> None:
        for node in nodes:
            # first match wins for duplicate ids
            self._entries.setdefault(node.id, TaxonEntry(node=node, parent=parent, siblings=nodes))
            if node.children:
                self._index(node.children, node)

    def get(self, taxon_id: TaxonId) -> Optional[TaxonEntry]:
        return self._entries.get(str(taxon_id))

    def parent_id(self, taxon_id: TaxonId) -> Optional[str]:
        entry = self.get(taxon_id)
        if entry is None or entry.parent is None:
            return None
        return entry.parent.id

    def subtree_ids(self, taxon_id: TaxonId) -> Set[str]:
        entry = self.get(taxon_id)
        if entry is None:
            return set()
        return {node.id for node in iter_tree([entry.node])}


def iter_tree(tree: Optional[List[Taxon]]) -> Iterator[Taxon]:
    """Depth-first, pre-order walk."""
    for node in tree or []:
        yield node
        if node.children:
            yield from iter_tree(node.children)


def is_root(parent_id: Optional[TaxonId]) -> bool:
    return parent_id is None or str(parent_id) == str(ROOT_PARENT_ID)


def find_by_id(tree: Optional[List[Taxon]], taxon_id: TaxonId) -> Optional[Taxon]:
    wanted = str(taxon_id)
    return next((node for node in iter_tree(tree) if node.id == wanted), None)


def find_by_name(
    tree: Optional[List[Taxon]],
    name: str,
    ignore_id: Optional[TaxonId] = None,
) -> Optional[Taxon]:
    """Case-insensitive scientific name lookup; a hit on ``ignore_id`` counts as a miss."""
    wanted = name.upper()
    found = next((node for node in iter_tree(tree) if node.scientific_name.upper() == wanted), None)
    if found is not None and ignore_id is not None and found.id == str(ignore_id):
        return None
    return found


def add_to_parent(tree: List[Taxon], node: Taxon, parent_id: TaxonId) -> bool:
    """Append ``node`` to the parent's children. Silently does nothing when the parent is missing."""
    parent = find_by_id(tree, parent_id)
    if parent is None:
        return False
    if parent.children is None:
        parent.children = []
    parent.children.append(node)
    return True


def is_descendant(tree: List[Taxon], ancestor_id: TaxonId, taxon_id: TaxonId) -> bool:
    return str(taxon_id) in TaxonIndex(tree).subtree_ids(ancestor_id)


def reparent(tree: List[Taxon], taxon_id: TaxonId, new_parent_id: Optional[TaxonId]) -> bool:
    """Move a taxon under ``new_parent_id`` (or to the top level for the root sentinel).

    Returns True when the tree shape changed. Moving a taxon to its current
    parent is a no-op. The caller validates that the target exists and is not
    inside the moved subtree.
    """
    index = TaxonIndex(tree)
    entry = index.get(taxon_id)
    if entry is None:
        return False
    current_parent_id = entry.parent.id if entry.parent is not None else None
    target_parent_id = None if is_root(new_parent_id) else str(new_parent_id)
    if current_parent_id == target_parent_id:
        return False

    node = entry.node
    position = next(i for i, sibling in enumerate(entry.siblings) if sibling.id == node.id)
    entry.siblings.pop(position)
    if target_parent_id is None:
        tree.append(node)
    else:
        add_to_parent(tree, node, target_parent_id)
    return True


def remove_taxon(tree: List[Taxon], taxon_id: TaxonId) -> Set[str]:
    """Detach a taxon with its whole subtree and return the removed ids."""
    index = TaxonIndex(tree)
    entry = index.get(taxon_id)
    if entry is None:
        return set()
    removed = index.subtree_ids(taxon_id)
    entry.siblings[:] = [sibling for sibling in entry.siblings if sibling.id != entry.node.id]
    return removed


def new_taxon(
    taxon_id: TaxonId,
    scientific_name: str,
    vernacular_name_no: Optional[str] = None,
    vernacular_name_en: Optional[str] = None,
    description_no: Optional[str] = None,
    description_en: Optional[str] = None,
) -> Taxon:
    return Taxon(
        id=str(taxon_id),
        scientific_name=scientific_name,
        vernacular_name=LocalizedText.from_pair(vernacular_name_no, vernacular_name_en),
        description=LocalizedText.from_pair(description_no, description_en),
    )


def modify_taxon_names(
    taxon: Taxon,
    tree: List[Taxon],
    scientific_name: Optional[str] = None,
    vernacular_name_no: Optional[str] = None,
    vernacular_name_en: Optional[str] = None,
    description_no: Optional[str] = None,
    description_en: Optional[str] = None,
) -> bool:
    """Apply name and description changes to ``taxon``.

    Returns False when ``scientific_name`` is already used by another taxon.
    The scientific name is left untouched in that case but vernacular names
    and descriptions are still written to the node, so a caller that gets
    False must not persist the document.
    """
    valid = True
    if scientific_name:
        if find_by_name(tree, scientific_name, ignore_id=taxon.id):
            valid = False
        else:
            taxon.scientific_name = scientific_name
    if vernacular_name_no:
        taxon.vernacular_name = _with_language(taxon.vernacular_name, "no", vernacular_name_no)
    if vernacular_name_en:
        taxon.vernacular_name = _with_language(taxon.vernacular_name, "en", vernacular_name_en)
    if description_no:
        taxon.description = _with_language(taxon.description, "no", description_no)
    if description_en:
        taxon.description = _with_language(taxon.description, "en", description_en)
    return valid


def _with_language(text: Optional[LocalizedText], language: str, value: str) -> LocalizedText:
    if text is None:
        text = LocalizedText()
    setattr(text, language, value)
    return text


def remove_taxon_statements(
    statements: Optional[List[Statement]],
    taxon_ids: Set[str],
) -> Optional[List[Statement]]:
    if statements is None:
        return None
    return [statement for statement in statements if statement.taxon_id not in taxon_ids]
