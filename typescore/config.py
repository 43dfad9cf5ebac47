"""Application configuration constants."""

from __future__ import annotations

import os
from dotenv import load_dotenv

load_dotenv()

from datetime import timezone
from pathlib import Path
from typing import List

BASE_DIR = Path(__file__).resolve().parent.parent

# Database
DB_NAME = os.getenv("DB_NAME", "typescore.db")
DB_PATH = str(BASE_DIR / DB_NAME)

TIMEZONE = timezone.utc

# Reference text shown to every new session unless the client supplies its own
DEFAULT_REFERENCE_TEXT = (
    "Աշակերտները դասարանում են։ Նրանք սովորում են հայոց լեզու։ "
    "Ուսուցչուհին գրատախտակին գրում է նոր բառեր։ Աշակերտները ուշադիր լսում են ուսուցչուհուն։ "
    "Պատուհանից երևում է դպրոցի բակը։ Այնտեղ մեծ ծառեր կան։ Զանգը հնչում է, և դասը ավարտվում է։ "
    "Երեխաները հավաքում են իրենց գրքերը։ Նրանք դուրս են գալիս դասարանից։ Բակում սկսում են խաղալ։ "
    "Արևը պայծառ շողում է։ Եղանակը տաք է և հաճելի։ Շուտով կսկսվի հաջորդ դասը։"
)
REFERENCE_TEXT = os.getenv("REFERENCE_TEXT") or DEFAULT_REFERENCE_TEXT

# Sectioning / speed policy
MIN_SECTION_WORDS: int = 9
MIN_ELAPSED_MINUTES: float = 0.001
# Longest reference or typed text accepted; alignment memory grows with the product of both lengths
MAX_TEXT_CHARS: int = int(os.getenv("MAX_TEXT_CHARS", "3000"))
SECTION_LABELS: List[str] = ["Beginning", "Middle", "End"]
TOTAL_LABEL: str = "Total"

# CORS
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# API Server
API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
API_RELOAD = os.getenv("API_RELOAD", "True").lower() in ("true", "1", "yes")

# Google Sheets export (disabled unless all three are set)
GOOGLE_CREDENTIAL_CLIENT_EMAIL = os.getenv("GOOGLE_CREDENTIAL_CLIENT_EMAIL")
GOOGLE_CREDENTIAL_CLIENT_PRIVATE_KEY = os.getenv("GOOGLE_CREDENTIAL_CLIENT_PRIVATE_KEY")
GOOGLE_SPREADSHEET_ID = os.getenv("GOOGLE_SPREADSHEET_ID")
SHEETS_RANGE = os.getenv("SHEETS_RANGE", "Sheet1!A:E")
SHEETS_TIMEOUT_S = float(os.getenv("SHEETS_TIMEOUT_S", "15"))
