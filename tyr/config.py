"""Central configuration — loads from .env via pydantic-settings.

All application constants (endpoints, sampling options, risk weights,
prompt fragments) are consolidated here so every module imports from a
single source of truth.

Usage:
    from tyr.config import get_settings
    settings = get_settings()
    print(settings.ai_provider)

    from tyr.config import MAX_TOKENS, RISK_WEIGHTS
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    # --- AI Provider ---
    ai_provider: str = "ollama"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3.1:8b"

    # --- HTTP ---
    # None disables the client-side timeout; local models can take minutes.
    http_timeout: float | None = None

    # --- API Server ---
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # --- Logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return singleton Settings instance (cached after first call)."""
    return Settings()


# ══════════════════════════════════════════════════════════════
# Versioning
# ══════════════════════════════════════════════════════════════

AGENT_VERSION: str = "0.1.0"


# ══════════════════════════════════════════════════════════════
# Provider wire constants
# ══════════════════════════════════════════════════════════════

ANTHROPIC_API_VERSION: str = "2023-06-01"
MAX_TOKENS: int = 4096

OLLAMA_GENERATE_PATH: str = "/api/generate"
ANALYSIS_TEMPERATURE: float = 0.3     # favour consistent JSON
INTERACTIVE_TEMPERATURE: float = 0.7  # favour conversational variety
TOP_P: float = 0.9


# ══════════════════════════════════════════════════════════════
# Risk scoring
# ══════════════════════════════════════════════════════════════

RISK_WEIGHTS: dict[str, float] = {
    "Critical": 10.0,
    "High": 7.0,
    "Medium": 4.0,
    "Low": 1.0,
}

# Per-threat average is capped here before scaling to 0-100.
MAX_AVERAGE_WEIGHT: float = 10.0
SCORE_SCALE: float = 10.0

# Score bands shared by the console and HTML reporters.
SCORE_BAND_CRITICAL: float = 75.0
SCORE_BAND_HIGH: float = 50.0
SCORE_BAND_MEDIUM: float = 25.0


# ══════════════════════════════════════════════════════════════
# Directory scan
# ══════════════════════════════════════════════════════════════

SCAN_EXTENSIONS: frozenset[str] = frozenset({"tf", "yaml", "yml", "json"})


# ══════════════════════════════════════════════════════════════
# Prompt fragments
# ══════════════════════════════════════════════════════════════

ANALYST_PREAMBLE: str = """\
You are an expert security architect and threat modeling specialist. Your role is \
to analyze system architectures, infrastructure code, and API specifications to \
identify security threats using the STRIDE methodology."""

STRIDE_GUIDE: str = """\
STRIDE Categories:
- Spoofing: Identity theft, authentication bypass
- Tampering: Data modification, code injection
- Repudiation: Denying actions, lack of audit trails
- Information Disclosure: Data leaks, unauthorized access
- Denial of Service: Resource exhaustion, availability attacks
- Elevation of Privilege: Unauthorized access escalation"""

THREAT_FIELDS_GUIDE: str = """\
For each threat you identify, provide:

1. **Threat Title**: Clear, concise name
2. **STRIDE Category**: Which category it falls under
3. **Risk Level**: CRITICAL, HIGH, MEDIUM, or LOW
4. **Description**: What the threat is and why it matters
5. **Attack Path**: Step-by-step how an attacker could exploit this
6. **Impact**: What damage could result
7. **Affected Components**: Which parts of the system are vulnerable
8. **Mitigations**: Specific countermeasures (with effort and effectiveness ratings)"""

SCHEMA_HEAD: str = """\
{
  "threats": [
    {
      "id": "T001",
      "title": "...",
      "category": "Spoofing|Tampering|Repudiation|InformationDisclosure|DenialOfService|ElevationOfPrivilege",
      "risk_level": "Critical|High|Medium|Low",
      "description": "...",
      "attack_path": ["step1", "step2", ...],
      "impact": "...",
      "affected_components": ["component1", ...],
      "mitigations": [
        {
          "title": "...",
          "description": "...",
          "effort": "Low|Medium|High",
          "effectiveness": "Partial|High|Complete"
        }
      ]"""

SCHEMA_EDUCATION_FIELD: str = """,
      "educational_note": "Detailed explanation of why this threat matters in \
real-world scenarios, including examples and common mistakes\""""

SCHEMA_TAIL: str = """
    }
  ],
  "recommendations": ["overall recommendation 1", ...]
}"""

LENIENT_FORMAT_INTRO: str = "Format your response as JSON with this structure:"
LENIENT_CLOSING: str = (
    "Be thorough but focus on realistic, high-impact threats. Prioritize "
    "vulnerabilities that are commonly exploited or have severe consequences."
)

STRICT_FORMAT_INTRO: str = (
    "CRITICAL: You MUST respond with ONLY valid JSON in this EXACT format:"
)
STRICT_CLOSING: str = """\
IMPORTANT RULES:
1. Respond with ONLY the JSON object, no markdown code blocks, no explanations
2. Do not include ```json or ``` markers
3. Ensure all JSON is valid and properly formatted
4. Be thorough but focus on realistic, high-impact threats
5. Prioritize vulnerabilities that are commonly exploited or have severe consequences"""

ADVISOR_PROMPT: str = """\
You are a security expert helping with threat modeling. Provide clear, actionable \
security advice.

When discussing threats:
- Be specific and practical
- Reference STRIDE categories where relevant
- Suggest concrete mitigations
- Explain in plain language
- Use real-world examples when helpful"""

ANALYSIS_REQUEST_TEMPLATE: str = (
    "Analyze the following {input_type} for security threats:\n\n{content}"
)
