"""
Model Registry

Static table of the models each provider can serve. Iteration order of
PROVIDER_REGISTRY and of each model list is the order models are listed
to clients.
"""

from __future__ import annotations

from dataclasses import dataclass

from dbchat.models.agent import Model, Provider


@dataclass(frozen=True)
class ProviderConfig:
    """Environment key and selectable models for one provider."""

    env_key: str
    models: tuple[Model, ...]


GOOGLE_MODELS: tuple[Model, ...] = (
    Model(slug="gemini-2.5-flash", name="Gemini 2.5 Flash", provider=Provider.GOOGLE),
    Model(slug="gemini-2.5-pro", name="Gemini 2.5 Pro", provider=Provider.GOOGLE),
    Model(slug="gemini-2.5-flash-lite", name="Gemini 2.5 Flash Lite", provider=Provider.GOOGLE),
    Model(
        slug="gemini-2.5-flash-preview-09-2025",
        name="Gemini 2.5 Flash Preview",
        provider=Provider.GOOGLE,
    ),
    Model(slug="gemini-3-pro-preview", name="Gemini 3 Pro Preview", provider=Provider.GOOGLE),
    Model(slug="gemini-3-flash-preview", name="Gemini 3 Flash Preview", provider=Provider.GOOGLE),
)

OPENAI_MODELS: tuple[Model, ...] = (
    Model(slug="gpt-4o", name="GPT-4o", provider=Provider.OPENAI),
    Model(slug="gpt-4o-mini", name="GPT-4o Mini", provider=Provider.OPENAI),
    Model(slug="gpt-4.1", name="GPT-4.1", provider=Provider.OPENAI),
)

ANTHROPIC_MODELS: tuple[Model, ...] = (
    Model(slug="claude-sonnet-4-5", name="Claude Sonnet 4.5", provider=Provider.ANTHROPIC),
    Model(slug="claude-3-5-haiku-latest", name="Claude 3.5 Haiku", provider=Provider.ANTHROPIC),
)

PROVIDER_REGISTRY: dict[Provider, ProviderConfig] = {
    Provider.GOOGLE: ProviderConfig(env_key="GOOGLE_API_KEY", models=GOOGLE_MODELS),
    Provider.OPENAI: ProviderConfig(env_key="OPENAI_API_KEY", models=OPENAI_MODELS),
    Provider.ANTHROPIC: ProviderConfig(env_key="ANTHROPIC_API_KEY", models=ANTHROPIC_MODELS),
}


def get_default_model_slug() -> str:
    return GOOGLE_MODELS[0].slug


def get_model_by_slug(slug: str) -> Model | None:
    for config in PROVIDER_REGISTRY.values():
        for model in config.models:
            if model.slug == slug:
                return model
    return None
