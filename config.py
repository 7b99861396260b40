from pathlib import Path
from dotenv import load_dotenv
import os

load_dotenv()

BASE_DIR = Path(__file__).parent

# Data directory (gitignored)
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
DATA_DIR.mkdir(exist_ok=True)

# Document store for placed orders
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/railsahayak.db")

# Client-side persisted state (stands in for browser localStorage)
LOCAL_STORAGE_PATH = Path(os.getenv("LOCAL_STORAGE_PATH", str(DATA_DIR / "local_storage.json")))

# Live train status (RailRadar: https://railradar.in). Disabled by default.
USE_REAL_TRAIN_API: bool = os.getenv("USE_REAL_TRAIN_API", "false").lower() in ("1", "true", "yes")
TRAIN_API_BASE_URL: str = os.getenv("TRAIN_API_BASE_URL", "https://railradar.in/api/v1")
TRAIN_API_KEY: str = os.getenv("TRAIN_API_KEY", "")
# The live endpoint cannot resolve a PNR, so PNR lookups query this train instead
DEFAULT_PNR_TRAIN: str = os.getenv("DEFAULT_PNR_TRAIN", "12951")
LIVE_TICK_SECONDS: int = int(os.getenv("LIVE_TICK_SECONDS", "2"))

# LLM (local Ollama: https://ollama.com)
OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2")

# Authentication (Firebase Identity Toolkit REST). Empty key → demo mode.
AUTH_API_KEY: str = os.getenv("AUTH_API_KEY", "")
AUTH_BASE_URL: str = os.getenv("AUTH_BASE_URL", "https://identitytoolkit.googleapis.com/v1")

# Food delivery window (minutes)
TIME_TO_ARRIVAL_MINUTES: int = int(os.getenv("TIME_TO_ARRIVAL_MINUTES", "10"))
HALT_DURATION_MINUTES: int = int(os.getenv("HALT_DURATION_MINUTES", "5"))
GST_RATE: float = float(os.getenv("GST_RATE", "0.05"))
DELIVERY_STATION: str = os.getenv("DELIVERY_STATION", "Kota Jn (KOTA)")
DELIVERY_COACH: str = os.getenv("DELIVERY_COACH", "B5 / Seat 32")

# Artificial latencies (seconds)
CHECKOUT_DELAY_SECONDS: float = float(os.getenv("CHECKOUT_DELAY_SECONDS", "2"))
DOCTOR_SCAN_SECONDS: float = float(os.getenv("DOCTOR_SCAN_SECONDS", "3"))
SIMULATION_LATENCY_SECONDS: float = float(os.getenv("SIMULATION_LATENCY_SECONDS", "0.8"))

# API
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))
CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
