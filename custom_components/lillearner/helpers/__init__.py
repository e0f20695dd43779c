"""Home Assistant-facing helpers for LilLearner.

- entity_helpers: dispatcher signal names, entity registry cleanup, lookups
- device_helpers: DeviceInfo construction for child devices
- llm_client: OpenAI-compatible chat-completions client
- voice_note_parser: Prompt building and reconciliation of parsed voice notes
"""
