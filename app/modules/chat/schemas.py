from pydantic import BaseModel
from typing import Any, List, Literal, Optional, Union


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: Any


class DocumentInput(BaseModel):
    """Structured input: optional text plus an extracted document and its page images"""
    text: Optional[str] = None
    document: Optional[Any] = None
    images: Optional[List[Any]] = None


class ChatContext(BaseModel):
    """Where in the user's project tree the conversation happens"""
    category: Optional[str] = None
    sub_category: Optional[str] = None
    sub_project_name: Optional[str] = None
    project_id: Optional[str] = None
    sub_project_id: Optional[str] = None


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = []
    input: Union[str, DocumentInput, None] = None
    session_id: Optional[str] = None
    agentId: Optional[str] = None
    context: Optional[ChatContext] = None
