"""
Legal Assistant

Chat-style consultant for the Motor Vehicles Act. Questions go to the AI
service; with maps enabled the question is answered with location
grounding instead (nearby police stations, RTO offices, etc.).
"""

from typing import List, Optional

from trafficguard.models import ChatMessage


WELCOME_MESSAGE = (
    "Hello, Officer. I am your AI Legal Assistant. You can ask me about "
    "traffic laws, penalties, or find nearby RTO services."
)
LOCATION_REQUIRED = "Please enable location services to use Maps features."


class LegalAssistant:
    """
    Conversation state plus routing to the right AI task

    Usage:
        assistant = LegalAssistant(ai_service)
        reply = await assistant.ask("What is the fine for no helmet?")
        reply = await assistant.ask("Nearest RTO office", use_maps=True, lat=18.52, lng=73.85)
    """

    def __init__(self, ai_service, max_messages: int = 200):
        self.ai_service = ai_service
        self.max_messages = max_messages
        self.messages: List[ChatMessage] = [ChatMessage(role='model', text=WELCOME_MESSAGE)]

    async def ask(self, query: str, use_maps: bool = False,
                  lat: Optional[float] = None, lng: Optional[float] = None) -> ChatMessage:
        """Record the question, answer it, and record the answer"""
        query = (query or "").strip()
        if not query:
            raise ValueError("Query must not be empty")

        self._add(ChatMessage(role='user', text=query))

        if use_maps:
            if lat is None or lng is None:
                reply = ChatMessage(role='model', text=LOCATION_REQUIRED)
            else:
                answer = await self.ai_service.find_nearby_services(query, lat, lng)
                reply = ChatMessage(role='model', text=answer.text, grounding=answer.grounding_chunks)
        else:
            text = await self.ai_service.ask_legal_assistant(query)
            reply = ChatMessage(role='model', text=text)

        self._add(reply)
        return reply

    def reset(self):
        self.messages = [ChatMessage(role='model', text=WELCOME_MESSAGE)]

    def _add(self, message: ChatMessage):
        self.messages.append(message)
        if len(self.messages) > self.max_messages:
            self.messages = self.messages[-self.max_messages:]
