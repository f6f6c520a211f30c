"""Service bootstrap: wires stores, clients and agents together."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Mapping, Optional

from closet_app.config import AppConfig
from closet_app.logging_config import configure_logging, get_logger, log_event
from agents.outfit_generator import OutfitGeneratorAgent
from agents.saved_outfits import SavedOutfitService
from agents.wardrobe_ingestion import WardrobeIngestionAgent
from logic.safety import OUTFIT_PICKER_INSTRUCTION
from memory.user_profile import UserContext, UserProfileService
from tools.background_removal import RembgSegmenter, Segmenter
from tools.image_storage import ImageStorage, LocalImageStorage
from tools.llm_client import CompletionClient, GeminiCompletionClient
from tools.outfit_store import OutfitStore, SQLiteOutfitStore
from tools.wardrobe_store import SQLiteWardrobeStore, WardrobeStore
from tools.wardrobe_tools import WardrobeTools


LOGGER = get_logger(__name__)


class ClosetApp:
    """Wires together storage backends, the LLM client and the agents.

    Every collaborator can be injected, which is how tests swap in fake
    completion clients and segmenters.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        wardrobe_store: Optional[WardrobeStore] = None,
        outfit_store: Optional[OutfitStore] = None,
        image_storage: Optional[ImageStorage] = None,
        segmenter: Optional[Segmenter] = None,
        completion_client: Optional[CompletionClient] = None,
        profile_service: Optional[UserProfileService] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or AppConfig.from_env()
        configure_logging()

        self.profile_service = profile_service or UserProfileService(
            self.config.profile_dir, premium_plan=self.config.premium_plan
        )
        self.wardrobe_store = wardrobe_store or SQLiteWardrobeStore(self.config.wardrobe_db_path)
        self.outfit_store = outfit_store or SQLiteOutfitStore(self.config.wardrobe_db_path)
        self.image_storage = image_storage or LocalImageStorage(
            self.config.image_storage_dir, public_base_url=self.config.public_image_base_url
        )
        self.segmenter = segmenter or RembgSegmenter()
        self.completion_client = completion_client or GeminiCompletionClient(
            model=self.config.model,
            system_instruction=OUTFIT_PICKER_INSTRUCTION,
            api_key=self.config.api_key,
            temperature=self.config.llm_temperature,
        )

        self.wardrobe_tools = WardrobeTools(self.wardrobe_store)
        self.outfit_generator = OutfitGeneratorAgent(
            wardrobe_tools=self.wardrobe_tools,
            completion_client=self.completion_client,
            rng=rng,
        )
        self.saved_outfits = SavedOutfitService(
            outfit_store=self.outfit_store, wardrobe_tools=self.wardrobe_tools
        )
        self.wardrobe_ingestion = WardrobeIngestionAgent(
            wardrobe_tools=self.wardrobe_tools,
            segmenter=self.segmenter,
            image_storage=self.image_storage,
        )

    def context_for(self, user_id: str) -> Optional[UserContext]:
        """Resolve the caller once; every operation below takes the result."""

        context = self.profile_service.build_context(user_id)
        if context is None:
            log_event(LOGGER, logging.WARNING, "unknown_user", user_id=user_id)
        return context

    def add_clothing(
        self,
        context: UserContext,
        image_bytes: Optional[bytes],
        filename: Optional[str],
        metadata: Mapping[str, Any],
    ) -> Dict[str, Any]:
        return self.wardrobe_ingestion.ingest(context, image_bytes, filename, metadata)

    def random_outfit(self, context: UserContext) -> Dict[str, Any]:
        return self.outfit_generator.generate_random(context)

    def ai_outfit(
        self,
        context: UserContext,
        prompt: str,
        previous: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Dict[str, Any]:
        """AI outfits are reserved for the premium plan; others get an error payload."""

        if not context.is_premium:
            return {
                "status": "error",
                "mode": "ai",
                "reason": "plan",
                "message": f"AI outfits require the {self.config.premium_plan} plan.",
            }
        return self.outfit_generator.generate_with_ai(context, prompt, previous=previous)

    def toggle_saved_outfit(self, context: UserContext, top_id: str, bottom_id: str, shoes_id: str) -> Dict[str, Any]:
        return self.saved_outfits.toggle(context, top_id, bottom_id, shoes_id)


__all__ = ["ClosetApp"]
