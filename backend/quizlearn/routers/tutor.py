from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel
from ..llm_client import CompletionClient, get_completion_client
from ..errors import GenerationServiceError
from ..schemas import PublicUser
from .auth import get_current_user

router = APIRouter(prefix="/api/tutor", tags=["tutor"])

TUTOR_PROMPT = """You are QuizLearn's expert programming tutor and educational assistant. Your role is to:

1. Provide clear, helpful explanations on programming and computer science topics
2. Break down complex concepts into understandable parts
3. Offer practical examples and code snippets when relevant
4. Encourage learning and critical thinking
5. Be patient and supportive

Guidelines:
- Keep responses focused and educational
- Use simple language but maintain technical accuracy
- Provide step-by-step explanations for complex topics
- Include relevant examples or analogies
- Be encouraging and positive

Student context: {context}"""


class ChatRequest(BaseModel):
	message: str
	context: Optional[str] = None


@router.post("/chat")
async def chat(
	req: ChatRequest,
	user: PublicUser = Depends(get_current_user),
	client: CompletionClient = Depends(get_completion_client),
):
	message = (req.message or "").strip()
	if not message:
		raise HTTPException(status_code=400, detail="Message is required")
	try:
		text = await client.complete(
			[
				{"role": "system", "content": TUTOR_PROMPT.format(context=req.context or "General programming questions")},
				{"role": "user", "content": message},
			],
			temperature=0.7,
			max_tokens=1000,
		)
	except GenerationServiceError as e:
		raise HTTPException(status_code=502, detail="AI tutor is temporarily unavailable. Please try again.") from e
	return {
		"success": True,
		"response": text.strip(),
		"timestamp": datetime.now(timezone.utc).isoformat(),
	}
