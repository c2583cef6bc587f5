"""
Typed document base.
Attributes are snake_case in Python and camelCase in stored/exported documents.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self):
        """Flat JSON-ready dict with camelCase keys"""
        return self.model_dump(mode='json', by_alias=True)

    @classmethod
    def from_document(cls, document):
        return cls.model_validate(document)
