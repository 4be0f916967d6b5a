from pydantic import BaseModel
from typing import Optional, List

from core.domain import CorpusState


class ChatRequest(BaseModel):
    # Optional so a missing message reaches the handler and gets a 400
    message: Optional[str] = None
    history: Optional[List[str]] = None

class ChatResponse(BaseModel):
    response: str

class ErrorResponse(BaseModel):
    error: str

class StatusResponse(BaseModel):
    state: CorpusState = CorpusState.EMPTY
    chunks_available: int = 0
    ready_for_queries: bool = False
