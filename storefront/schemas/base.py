"""Shared schema configuration"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase JSON"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def dump(model: BaseModel) -> dict:
    """JSON-ready dict using the public (camelCase) field names"""
    return model.model_dump(by_alias=True, mode="json")
