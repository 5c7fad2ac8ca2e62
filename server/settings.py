# SPDX-License-Identifier: Apache-2.0
from pydantic import BaseModel
import os, re, yaml, pathlib
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def redact_secret(value: str) -> str:
    """Redact API keys and secrets for logging"""
    if not value or len(value) < 8:
        return "***"
    return f"{value[:8]}***{value[-4:]}"


ROOT = pathlib.Path(__file__).resolve().parents[1]
SETTINGS_PATH = pathlib.Path(os.getenv("FACESCAN_SETTINGS", ROOT / "settings.yaml"))


def _load_yaml(path: pathlib.Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


CFG = _load_yaml(SETTINGS_PATH)


def expand_env_vars(value):
    """Expand ${VAR} and ${VAR:-default} in string values"""
    if isinstance(value, str) and "${" in value:
        def replacer(match):
            var_with_default = match.group(1)
            if ":-" in var_with_default:
                var, default = var_with_default.split(":-", 1)
                return os.getenv(var, default)
            return os.getenv(var_with_default, "")
        return re.sub(r'\$\{([^}]+)\}', replacer, value)
    return value


class AppSettings(BaseModel):
    # LLM Provider Configuration
    provider: str = expand_env_vars(CFG.get("provider", "openai"))
    openai_model: str = expand_env_vars(CFG.get("openai_model", "gpt-4o-mini"))
    anthropic_model: str = expand_env_vars(CFG.get("anthropic_model", "claude-3-5-sonnet-20241022"))
    max_output_tokens: int = int(expand_env_vars(str(CFG.get("max_output_tokens", 1200))))
    timeout_seconds: int = int(expand_env_vars(str(CFG.get("timeout_seconds", 45))))
    max_retries: int = int(expand_env_vars(str(CFG.get("max_retries", 1))))

    # API Keys (from environment)
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_project: str = os.getenv("OPENAI_PROJECT", "")
    openai_org: str = os.getenv("OPENAI_ORG", "")
    anthropic_api_key: str = os.getenv("ANTHROPIC_API_KEY", "")

    # Uploads
    max_upload_mb: float = float(expand_env_vars(str(CFG.get("max_upload_mb", 6))))
    max_image_megapixels: float = float(expand_env_vars(str(CFG.get("max_image_megapixels", 40))))

    # CORS
    cors_origins: list[str] = CFG.get("cors_origins", [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ])

    def llm_configs(self) -> tuple[dict, dict]:
        """Client kwargs for the OpenAI and Anthropic providers"""
        openai_cfg = {
            "api_key": self.openai_api_key,
            "model": self.openai_model,
            "timeout_seconds": self.timeout_seconds,
            "project": self.openai_project or None,
            "organization": self.openai_org or None,
        }
        anthropic_cfg = {
            "api_key": self.anthropic_api_key,
            "model": self.anthropic_model,
            "timeout_seconds": self.timeout_seconds,
        }
        return openai_cfg, anthropic_cfg


SETTINGS = AppSettings()
