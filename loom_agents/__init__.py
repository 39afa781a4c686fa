"""loom-agents.

This package runs bounded, tool-augmented language-model "agents" for an
interactive canvas application and keeps them from running forever, looping
or overspending.

Core subpackages
----------------

- ``loom_agents.agent_core``:

  - The LangGraph-based guardrailed execution engine.
  - Loop detection, pricing and budget enforcement.
  - The tool boundary (tool sets, pending-confirmation results).
  - The model call capability and its Pydantic AI implementation.

- ``loom_agents.core``:

  - Settings, logging configuration and Logfire monitoring.
"""
