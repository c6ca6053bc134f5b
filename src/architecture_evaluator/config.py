"""Centralized configuration management for the architecture evaluator."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .scorer import CategoryWeights


class CategoryWeightsConfig(BaseModel):
    """Weights for combining category scores into the overall score.

    These weights only affect the overall score; category rule tables are
    fixed. They should sum to 1.0.
    """
    scalability: float = Field(0.30, description="Weight for the scalability category")
    reliability: float = Field(0.25, description="Weight for the reliability category")
    security: float = Field(0.25, description="Weight for the security category")
    cost_efficiency: float = Field(0.20, description="Weight for the cost efficiency category")

    def to_weights(self) -> CategoryWeights:
        return CategoryWeights(
            scalability=self.scalability,
            reliability=self.reliability,
            security=self.security,
            cost_efficiency=self.cost_efficiency,
        )


class BedrockConfig(BaseModel):
    """Primary language-model provider: Anthropic models on Amazon Bedrock."""
    enabled: bool = Field(True, description="Try Bedrock before the chat-completions gateway")
    model_id: str = Field(
        "anthropic.claude-3-sonnet-20240229-v1:0",
        description="Bedrock model identifier"
    )
    region: Optional[str] = Field(
        None,
        description="AWS region (defaults to AWS_REGION, then us-east-1)"
    )
    max_tokens: int = Field(4096, description="Maximum tokens in the model response")
    temperature: float = Field(0.3, description="Sampling temperature")
    top_p: float = Field(0.9, description="Nucleus sampling cutoff")
    connect_timeout: float = Field(10.0, description="Connect timeout in seconds")
    read_timeout: float = Field(120.0, description="Read timeout in seconds")

    def resolved_region(self) -> str:
        return self.region or os.environ.get("AWS_REGION") or "us-east-1"


class ChatCompletionsConfig(BaseModel):
    """Fallback provider: any OpenAI-compatible chat-completions gateway."""
    enabled: bool = Field(True, description="Use the gateway when Bedrock is unavailable")
    base_url: str = Field(
        "https://ai.gateway.lovable.dev/v1",
        description="Gateway base URL (the /chat/completions path is appended)"
    )
    model: str = Field("google/gemini-3-flash-preview", description="Gateway model name")
    api_key_env: str = Field(
        "LLM_GATEWAY_API_KEY",
        description="Environment variable holding the gateway API key"
    )
    temperature: Optional[float] = Field(None, description="Sampling temperature (gateway default if unset)")
    connect_timeout: float = Field(10.0, description="Connect timeout in seconds")
    read_timeout: float = Field(120.0, description="Read timeout in seconds")


class DecompositionConfig(BaseModel):
    """Free-text decomposition behavior."""
    heuristic_fallback: bool = Field(
        False,
        description="Fall back to keyword heuristics when no language model answers"
    )


class ExplanationConfig(BaseModel):
    """Narrative explanation behavior."""
    enabled: bool = Field(True, description="Request a narrative explanation for description-based analyses")
    placeholder: str = Field(
        "AI explanation unavailable.",
        description="Text returned when no provider could produce an explanation"
    )


class ServerConfig(BaseModel):
    """HTTP server settings."""
    host: str = Field("127.0.0.1", description="Bind address")
    port: int = Field(8000, description="Bind port")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")


class LoggingConfig(BaseModel):
    """Logging settings."""
    level: str = Field("INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    dev_mode: bool = Field(False, description="Use Rich console formatting")


class EvaluatorConfig(BaseModel):
    """Complete configuration for the architecture evaluator."""
    category_weights: CategoryWeightsConfig = Field(default_factory=CategoryWeightsConfig)
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)
    chat_completions: ChatCompletionsConfig = Field(default_factory=ChatCompletionsConfig)
    decomposition: DecompositionConfig = Field(default_factory=DecompositionConfig)
    explanation: ExplanationConfig = Field(default_factory=ExplanationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# Global config instance
_config: Optional[EvaluatorConfig] = None


def get_config() -> EvaluatorConfig:
    """Get the current configuration.

    Returns the global config, initializing with defaults if not yet loaded.
    """
    global _config
    if _config is None:
        _config = EvaluatorConfig()
    return _config


def load_config(path: Path) -> EvaluatorConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The loaded EvaluatorConfig.
    """
    global _config

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    _config = EvaluatorConfig.model_validate(data or {})
    return _config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _config
    _config = EvaluatorConfig()


def find_config_file() -> Optional[Path]:
    """Find an evaluator configuration file.

    Looks in (order of priority):
    1. ARCHITECTURE_EVALUATOR_CONFIG environment variable
    2. ./evaluator-config.yaml
    3. ./evaluator-config.yml
    4. ~/.config/architecture-evaluator/config.yaml
    """
    env_path = os.environ.get("ARCHITECTURE_EVALUATOR_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    for name in ["evaluator-config.yaml", "evaluator-config.yml"]:
        path = Path(name)
        if path.exists():
            return path

    user_config = Path.home() / ".config" / "architecture-evaluator" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def load_config_if_present(path: Optional[Path] = None) -> EvaluatorConfig:
    """Load an explicit or discovered config file, else return defaults."""
    path = path or find_config_file()
    if path is None:
        return get_config()
    return load_config(path)


def save_default_config(path: Path) -> None:
    """Save the default configuration to a YAML file.

    Args:
        path: Path where to save the configuration.
    """
    config = EvaluatorConfig()
    data = config.model_dump()

    yaml_content = """# Architecture Evaluator Configuration
# ====================================
#
# Category weights set how the four category scores combine into the
# overall score. Provider sections configure the language models used to
# decompose free-text descriptions and to write narrative explanations.
#
# Copy this file to one of these locations:
#   - ./evaluator-config.yaml (current directory)
#   - ~/.config/architecture-evaluator/config.yaml (user config)
#
# Or set the ARCHITECTURE_EVALUATOR_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)
