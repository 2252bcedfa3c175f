"""
Financial advice and chatbot endpoints (proxied to Claude)
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import List, Optional, Union

from sarthi.agents.financial_advisor.agent import FinancialAdvisorAgent

router = APIRouter()


class AdviceRequest(BaseModel):
    name: str = Field(min_length=1)
    age: int = Field(ge=1, le=120)
    monthly_income: Union[float, str]
    financial_goal: str = Field(min_length=1)
    location: str = Field(min_length=1)
    preferred_language: str = Field(min_length=1)
    business_type: str = Field(min_length=1)
    existing_savings: Union[float, str]
    risk_tolerance: str = Field(min_length=1)

    class Config:
        str_strip_whitespace = True


class AdviceResponse(BaseModel):
    financial_advice: str


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    conversation_history: Optional[List[ChatTurn]] = None


class ChatResponse(BaseModel):
    response: str
    timestamp: str


def get_financial_advisor() -> FinancialAdvisorAgent:
    return FinancialAdvisorAgent()


@router.post("/financial-advice", response_model=AdviceResponse)
async def generate_financial_advice(
    data: AdviceRequest,
    agent: FinancialAdvisorAgent = Depends(get_financial_advisor),
):
    """Generate a personalised financial advice report"""
    return await agent.generate_advice(data.model_dump())


@router.post("/chat", response_model=ChatResponse)
async def chat(
    data: ChatRequest,
    agent: FinancialAdvisorAgent = Depends(get_financial_advisor),
):
    """One turn of the financial chatbot"""
    history = [turn.model_dump() for turn in data.conversation_history or []]
    return await agent.chat(data.message, history)
