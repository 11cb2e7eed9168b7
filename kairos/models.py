from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Identity record returned by Supabase auth; only id and email are used."""

    model_config = ConfigDict(extra="ignore")

    id: str
    email: Optional[str] = None


class LearnRequest(BaseModel):
    """One row of the learn_requests table."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[int, str]] = None
    user_id: str
    input_text: str
    openai_response: Optional[str] = None


class DashboardState(BaseModel):
    user: Optional[User] = None
    question: str = ""
    solution: str = ""
    loading: bool = Field(False, description="True only while a submit is in flight")
