from pydantic import BaseModel, Field
from typing import Any, ClassVar, Dict, Optional

from cardreader.models.media_type import INPUT_ACCEPT
from cardreader.utils.constants import AVATAR_NONE, SPEC_VERSION_V2


def _text(value: Any) -> str:
    """Non-empty string values only; anything else reads as absent."""
    return value if isinstance(value, str) and value else ""


class CharacterMetadata(BaseModel):
    """Character metadata exactly as parsed.

    Holds the fields of both schema generations side by side (``name`` and
    ``char_name``, ``first_mes`` and ``char_greeting`` ...). Values are not
    type checked or converted: a card stores whatever its exporter wrote, and
    keys this model does not name are kept as extra fields.
    """
    name: Optional[Any] = Field(default="", description="The character's name.")
    char_name: Optional[Any] = Field(default="", description="Legacy display name.")
    description: Optional[Any] = Field(default="", description="Character description.")
    system_prompt: Optional[Any] = Field(default="", description="System prompt / persona text.")
    char_persona: Optional[Any] = Field(default="", description="Legacy persona text.")
    first_mes: Optional[Any] = Field(default="", description="Opening message.")
    char_greeting: Optional[Any] = Field(default="", description="Legacy opening message.")
    personality: Optional[Any] = Field(default="")
    scenario: Optional[Any] = Field(default="")
    world_scenario: Optional[Any] = Field(default="", description="Legacy scenario.")
    mes_example: Optional[Any] = Field(default="")
    example_dialogue: Optional[Any] = Field(default="", description="Legacy example messages.")
    post_history_instructions: Optional[Any] = Field(default="")
    creator: Optional[Any] = Field(default="")
    creator_notes: Optional[Any] = Field(default="")
    character_version: Optional[Any] = Field(default="")
    create_date: Optional[Any] = Field(default="")
    chat: Optional[Any] = Field(default="")
    tags: Optional[Any] = Field(default_factory=list)
    avatar: Optional[Any] = Field(default="", description="Avatar reference, '' or 'none' when absent.")
    character_book: Optional[Any] = Field(default=None, description="Lore book associated with the character.")
    alternate_greetings: Optional[Any] = Field(default_factory=list)
    extensions: Optional[Any] = Field(default_factory=dict, description="Opaque vendor metadata.")

    class Config:
        extra = "allow"
        frozen = True

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CharacterMetadata":
        return cls.model_validate(payload)

    def to_dict(self) -> Dict[str, Any]:
        """Exactly the keys and values that were supplied, including unknown ones."""
        return self.model_dump(exclude_unset=True)


class CharacterCard(BaseModel):
    """Spec-versioned envelope: ``{"spec", "spec_version", "data"}``."""
    spec: Optional[Any] = None
    spec_version: Optional[Any] = None
    data: Dict[str, Any]

    class Config:
        extra = "allow"

    @staticmethod
    def is_envelope(card: Dict[str, Any]) -> bool:
        # Exact match only; other explicit versions are read as flat records
        return card.get("spec_version") == SPEC_VERSION_V2

    @classmethod
    def unwrap(cls, card: Dict[str, Any]) -> Dict[str, Any]:
        if not cls.is_envelope(card):
            return card
        return cls.model_validate(card).data


class Character(BaseModel):
    """A character read from one source file. Never mutated after construction."""
    INPUT_ACCEPT: ClassVar[str] = INPUT_ACCEPT

    metadata: CharacterMetadata
    fallback_avatar: str = ""

    class Config:
        frozen = True

    @property
    def avatar(self) -> str:
        avatar = _text(self.metadata.avatar)
        if avatar and avatar != AVATAR_NONE:
            return avatar
        return self.fallback_avatar or ""

    @property
    def description(self) -> str:
        return _text(self.metadata.system_prompt) or _text(self.metadata.description)

    @property
    def name(self) -> str:
        return _text(self.metadata.name) or _text(self.metadata.char_name)

    def to_summary(self, include_fallback_avatar: bool = True) -> Dict[str, Any]:
        if include_fallback_avatar:
            avatar = self.avatar
        else:
            avatar = _text(self.metadata.avatar)
            if avatar == AVATAR_NONE:
                avatar = ""
        return {
            "name": self.name,
            "description": self.description,
            "avatar": avatar,
            "metadata": self.metadata.to_dict(),
        }
