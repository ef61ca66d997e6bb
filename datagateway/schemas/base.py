from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Wire models use camelCase JSON keys and accept either spelling on input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
