# gpt_habits/schemas/common.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """El frontend habla camelCase (questionNumber, timeRemaining...); aquí snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class OkOut(CamelModel):
    ok: bool = True
