"""Catalogs offered by the studio."""

ERAS = ["1920s", "1950s", "1960s", "1970s", "1980s", "1990s", "2000s", "2010s", "2020s", "Futuristic"]

TONES = ["Wholesome", "Edgy", "Nostalgic", "Sophisticated", "Humorous", "Dramatic", "Minimalist", "Surreal"]

# Prebuilt TTS voices: value -> display name
VOICES = {
    "Kore": "Kore (Female)",
    "Puck": "Puck (Male)",
    "Charon": "Charon (Male)",
    "Fenrir": "Fenrir (Male)",
    "Zephyr": "Zephyr (Female)",
}

ASPECT_RATIOS = ["16:9", "9:16", "1:1", "4:3", "3:4"]

# Veo only renders landscape or portrait
VIDEO_ASPECT_RATIOS = ["16:9", "9:16"]

# Font identifier -> TrueType file looked up for image export
AVAILABLE_FONTS = {
    "Lato": "Lato-Regular.ttf",
    "Montserrat": "Montserrat-Regular.ttf",
    "Oswald": "Oswald-Regular.ttf",
    "Pacifico": "Pacifico-Regular.ttf",
    "Orbitron": "Orbitron-Regular.ttf",
    "Bebas Neue": "BebasNeue-Regular.ttf",
    "Lobster": "Lobster-Regular.ttf",
}

# Auto-generated caption style
DEFAULT_FONT = "Bebas Neue"
DEFAULT_TEXT_SIZE = 8.0
DEFAULT_TEXT_COLOR = "#FFFFFF"
DEFAULT_TEXT_WIDTH = 80.0
CAPTION_START_Y = 75.0
CAPTION_SPACING_Y = 10.0

DEFAULT_LOGO_SIZE = 15.0
