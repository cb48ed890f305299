# cardreader/utils/constants.py
# Shared constants for locating and decoding embedded character cards

# PNG text chunk keyword reserved for character data
CHARA_KEYWORD = "chara"

# Chunk types that carry keyword/text pairs; none of them are image data
PNG_TEXT_CHUNK_TYPES = ("tEXt", "zTXt", "iTXt")

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# EXIF tag holding the character payload in WebP files
USER_COMMENT_TAG = "UserComment"

# Description reported for a UserComment whose character code is not declared
EXIF_UNDEFINED = "Undefined"

# Literal avatar value meaning "no embedded avatar"
AVATAR_NONE = "none"

# Envelope discriminator for chara_card_v2
SPEC_VERSION_V2 = "2.0"

DEFAULT_SETTINGS_FILENAME = "settings.json"
SETTINGS_ENV_VAR = "CARDREADER_SETTINGS"
