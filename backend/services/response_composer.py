"""Response composer: turns scored chunks into the reply shown to the user."""
import logging
from typing import List, Optional

from models.chunk import ScoredChunk
from models.conversation import ChatResponse
from models.settings import Settings
from services.query_classifier import QueryClassifier
from config import AID_PROGRAM_NAME, DEFAULT_CONTACT_EMAIL, SOLO_TRAVELER_EMAIL

logger = logging.getLogger(__name__)


class ResponseComposer:
    """Formats the best-matching answer and appends the rule-based inserts."""

    GREETING_REPLY = (
        "Hey there! 🎉 So excited you're interested in our Class of '81 45th Reunion! "
        "What would you like to know?"
    )
    THANKS_REPLY = "You're so welcome! Can't wait to see you at the reunion! Any other questions?"
    EMPTY_QUERY_REPLY = "Please ask me a question about the reunion!"
    FALLBACK_TEMPLATE = (
        "Hmm, I don't have that information yet 🤔\n\n"
        "Please reach out to {contact_email} for details. Is there anything else I can help you with?"
    )
    AID_TEMPLATE = (
        "💙 Financial aid is available through the {program} Fund if cost is a concern. "
        "Just email {contact_email} confidentially!"
    )
    SOLO_TEMPLATE = (
        "👥 Coming solo? We have a roommate pairing program! "
        "Email your mobile number to {solo_email} to join the WhatsApp group."
    )

    def __init__(
        self,
        classifier: Optional[QueryClassifier] = None,
        aid_program_name: str = AID_PROGRAM_NAME,
        solo_traveler_email: str = SOLO_TRAVELER_EMAIL
    ):
        """
        Initialize the composer.

        Args:
            classifier: Query classifier shared with the relevance scorer
            aid_program_name: Name of the financial-aid program mentioned in cost replies
            solo_traveler_email: Address solo travelers write to for the roommate program
        """
        self.classifier = classifier or QueryClassifier()
        self.aid_program_name = aid_program_name
        self.solo_traveler_email = solo_traveler_email

    def greeting_reply(self, utterance: str) -> Optional[ChatResponse]:
        """Canned reply for greetings and thanks, None for anything else."""
        if self.classifier.is_thanks(utterance):
            return ChatResponse(message=self.THANKS_REPLY)
        if self.classifier.is_greeting(utterance):
            return ChatResponse(message=self.GREETING_REPLY)
        return None

    def compose(self, utterance: str, scored_chunks: List[ScoredChunk], settings: Settings) -> ChatResponse:
        """
        Build the reply for an utterance from its scored chunks.

        Args:
            utterance: User message
            scored_chunks: Scorer output, best first (may be empty)
            settings: Current application settings

        Returns:
            ChatResponse with the message, map flag and source chunk ids
        """
        contact_email = settings.contact_email or DEFAULT_CONTACT_EMAIL

        if not scored_chunks:
            logger.info("No matching chunks, returning fallback response")
            return ChatResponse(message=self.FALLBACK_TEMPLATE.format(contact_email=contact_email))

        category = self.classifier.classify(utterance)
        answer = "\n\n".join(item.chunk.answer.strip() for item in scored_chunks)

        marker = self.classifier.marker_for(category)
        message = f"{marker} {answer}" if marker else answer

        if self.classifier.mentions_cost(utterance) and self.aid_program_name.lower() not in message.lower():
            message += "\n\n" + self.AID_TEMPLATE.format(
                program=self.aid_program_name, contact_email=contact_email
            )

        if self.classifier.mentions_solo(utterance):
            message += "\n\n" + self.SOLO_TEMPLATE.format(solo_email=self.solo_traveler_email)

        response = ChatResponse(
            message=message,
            sources=[item.chunk.chunk_id for item in scored_chunks]
        )

        if category == QueryClassifier.LOCATION and settings.map_link:
            response.include_map = True
            response.map_link = settings.map_link

        logger.info(
            f"Composed reply from {len(scored_chunks)} chunk(s) "
            f"(category: {category}, map: {response.include_map})"
        )
        return response
