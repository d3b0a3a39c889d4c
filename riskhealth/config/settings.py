import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent.parent / ".env")

class Settings:
    APP_ENV: str = os.getenv("APP_ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    MOCK_MODE: bool = os.getenv("MOCK_MODE", "true").lower() == "true"
    RISK_DATA_FILE: str = os.getenv("RISK_DATA_FILE", "")
    BENCHMARKS_FILE: str = os.getenv("BENCHMARKS_FILE", "")
    REPORT_OUTPUT_DIR: Path = Path(os.getenv("REPORT_OUTPUT_DIR", "./reports"))
    ORGANIZATION_NAME: str = os.getenv("ORGANIZATION_NAME", "Organização")
    VERSION: str = "1.0.0"
    APP_NAME: str = "Risk Health Check"

    @classmethod
    def validate(cls) -> list:
        warnings = []
        if cls.MOCK_MODE:
            warnings.append("MOCK MODE active — using the bundled demo risk register.")
        elif not cls.RISK_DATA_FILE:
            warnings.append("RISK_DATA_FILE not set — no risk register to load.")
        if not cls.BENCHMARKS_FILE:
            warnings.append("BENCHMARKS_FILE not set — using default category benchmarks.")
        return warnings

    @classmethod
    def has_custom_benchmarks(cls) -> bool:
        return bool(cls.BENCHMARKS_FILE)

settings = Settings()
