from enum import Enum
from pydantic import BaseModel


class IntentType(str, Enum):
    ANSWER = "answer"
    SUGGEST_PROMPT = "suggest_prompt"


class ResponderIntent(BaseModel):
    type: IntentType
    content: str
