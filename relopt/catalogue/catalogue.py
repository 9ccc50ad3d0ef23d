"""Catalogue of named relations and their attribute statistics."""

from typing import Dict, List

from ..plan.relation import Attribute, NamedRelation


class CatalogueError(Exception):
    """Raised when a relation or attribute is missing from the catalogue."""

    pass


class Catalogue:
    """Directory of named relations and attributes, indexed by name.

    Statistics live on the relations and attributes themselves; the
    catalogue only owns the registry.
    """

    def __init__(self):
        """Initialize an empty catalogue."""
        self.relations: Dict[str, NamedRelation] = {}
        self.attributes: Dict[str, Attribute] = {}

    def create_relation(self, name: str, tuple_count: int) -> NamedRelation:
        """Create a named relation and register it.

        Args:
            name: Relation name
            tuple_count: Number of tuples in the relation

        Returns:
            The registered relation
        """
        relation = NamedRelation(name, tuple_count)
        self.relations[name] = relation
        return relation

    def create_attribute(
        self, relation_name: str, attribute_name: str, value_count: int
    ) -> Attribute:
        """Create an attribute and add it to a registered relation.

        Args:
            relation_name: Relation that owns the attribute
            attribute_name: Attribute name
            value_count: Number of distinct values

        Returns:
            The registered attribute
        """
        relation = self.get_relation(relation_name)
        attribute = Attribute(attribute_name, value_count)
        self.attributes[attribute_name] = attribute
        relation.add_attribute(attribute)
        return attribute

    def get_relation(self, name: str) -> NamedRelation:
        """Get a relation by name.

        Raises:
            CatalogueError: If no relation has this name
        """
        relation = self.relations.get(name)
        if relation is None:
            raise CatalogueError(f"Named relation {name} not found")
        return relation

    def get_attribute(self, name: str) -> Attribute:
        """Get an attribute by name.

        Raises:
            CatalogueError: If no attribute has this name
        """
        attribute = self.attributes.get(name)
        if attribute is None:
            raise CatalogueError(f"Attribute {name} not found")
        return attribute

    def relation_names(self) -> List[str]:
        return list(self.relations)

    def render(self) -> str:
        """Render the catalogue in its serialised text form."""
        return "\n".join(relation.render() for relation in self.relations.values())

    def __repr__(self) -> str:
        return f"Catalogue(relations={len(self.relations)}, attributes={len(self.attributes)})"
