"""
DBChat Agent Module

Agent pool, runtime and the per-session state they share.

Available Components:
    - AgentManager: Lazily built pool of agents, one per model slug
    - DBAgent: Tool-calling chat runtime bound to one model
    - SchemaCache: TTL-bounded schema cache over session state
    - ResponseParser: Model text to ChatResponse
    - InMemorySessionService: Process-lifetime session store

Usage:
    from dbchat.agent.manager import AgentManager
    from dbchat.config import get_settings

    manager = AgentManager(get_settings().to_agent_config())
    response = await manager.chat(request)
"""
