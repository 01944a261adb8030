import logging

from truthguard.services.verdict_service import VerdictGenerator, build_chat_messages

logger = logging.getLogger(__name__)

BUSY_REPLY = "System busy."


class ChatService:
    """Thin passthrough to the model, no evidence step."""

    def __init__(self, generator: VerdictGenerator):
        self.generator = generator

    def reply(self, message: str) -> str:
        payload = self.generator.generate_raw(build_chat_messages(message))
        if not payload:
            logger.warning("[Chat] No model reply, answering busy")
            return BUSY_REPLY

        reply = payload.get("reply") or payload.get("explanation")
        return reply if isinstance(reply, str) and reply.strip() else BUSY_REPLY
