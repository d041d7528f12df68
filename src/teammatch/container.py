"""Dependency injection container for the matching system."""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .agent import BoundedAgent, BoundedAgentConfig, LLMAgent, LLMAgentConfig
from .core import EmbeddingCache, EmbeddingProvider, EmbeddingRanker, SkillRanker
from .core.embedding import EmbeddingRankerConfig
from .core.similarity import RankerConfig
from .llm import ChatModel
from .storage import InMemoryUserStore, UserStore
from .tools import IntroDrafter, MatchingTool, ToolDispatcher
from .tools.matching import MatchingConfig

# Keys consumed when building OpenAI clients rather than core components.
_CLIENT_KEYS = {"embedding": ("model",), "llm": ("model", "timeout")}


class MatchContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    store = providers.Singleton(InMemoryUserStore)

    ranker_config = providers.Singleton(RankerConfig)
    ranker = providers.Singleton(SkillRanker, config=ranker_config)

    embedding_cache = providers.Singleton(EmbeddingCache)
    embedding_ranker = providers.Object(None)

    matching_config = providers.Singleton(MatchingConfig)
    matching_tool = providers.Singleton(
        MatchingTool,
        store=store,
        ranker=ranker,
        embedding_ranker=embedding_ranker,
        config=matching_config,
    )
    drafter = providers.Singleton(IntroDrafter, store=store)

    dispatcher = providers.Singleton(
        ToolDispatcher,
        matching_tool=matching_tool,
        drafter=drafter,
    )

    bounded_agent_config = providers.Singleton(BoundedAgentConfig)
    bounded_agent = providers.Factory(BoundedAgent, dispatcher=dispatcher, config=bounded_agent_config)

    chat_model = providers.Object(None)
    llm_agent_config = providers.Singleton(LLMAgentConfig)
    llm_agent = providers.Factory(
        LLMAgent,
        dispatcher=dispatcher,
        model=chat_model,
        config=llm_agent_config,
    )


def create_container(
    *,
    settings: dict[str, Any] | None = None,
    store: UserStore | None = None,
    embedding_provider: EmbeddingProvider | None = None,
    chat_model: ChatModel | None = None,
) -> MatchContainer:
    """Instantiate container with optional overrides."""

    container = MatchContainer()
    sections = _core_sections(settings)

    if store is not None:
        container.store.override(providers.Object(store))

    if "ranking" in sections:
        container.ranker_config.override(providers.Object(RankerConfig(**sections["ranking"])))

    if "matching" in sections:
        container.matching_config.override(providers.Object(MatchingConfig(**sections["matching"])))

    embed_settings = dict(sections.get("embedding", {}))
    cache_settings = {
        key: embed_settings.pop(key)
        for key in ("cache_size", "eviction")
        if key in embed_settings
    }
    if cache_settings:
        container.embedding_cache.override(
            providers.Singleton(
                EmbeddingCache,
                max_size=cache_settings.get("cache_size", 5000),
                eviction=cache_settings.get("eviction", "fifo"),
            )
        )

    if embedding_provider is not None:
        container.embedding_ranker.override(
            providers.Singleton(
                EmbeddingRanker,
                embedding_provider,
                cache=container.embedding_cache,
                config=EmbeddingRankerConfig(**embed_settings),
            )
        )

    if "agent" in sections:
        container.bounded_agent_config.override(
            providers.Object(BoundedAgentConfig(**sections["agent"]))
        )

    if "llm" in sections:
        container.llm_agent_config.override(providers.Object(LLMAgentConfig(**sections["llm"])))

    if chat_model is not None:
        container.chat_model.override(providers.Object(chat_model))

    return container


def _core_sections(settings: dict[str, Any] | None) -> dict[str, dict[str, Any]]:
    if not isinstance(settings, dict):
        return {}
    sections: dict[str, dict[str, Any]] = {}
    for name, values in settings.items():
        if not isinstance(values, dict):
            continue
        dropped = _CLIENT_KEYS.get(name, ())
        sections[name] = {key: value for key, value in values.items() if key not in dropped}
    return sections
