# Supabase tables: agents, user_agents
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

agents:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null)
- description: text (nullable)
- system_prompt: text (not null) - forwarded to the agent webhook with each chat
- webhook_url: text (nullable) - falls back to AGENT_WEBHOOK_URL when null
- category: text (nullable) - sent as the chat payload category
- is_active: boolean (default: true) - inactive agents are hidden from users
- is_global: boolean (default: true) - available to every user
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

user_agents:
- id: uuid (primary key, default: gen_random_uuid())
- agent_id: uuid (foreign key to agents.id, not null)
- user_id: uuid (foreign key to users.id, not null)
- created_at: timestamp (default: now())
- unique(agent_id, user_id)

A user can chat with an agent when it is active and either global or
assigned to them. Deleting an agent or a user removes its user_agents rows.
"""

AGENT_COLUMNS = (
    "id, name, description, system_prompt, webhook_url, category, "
    "is_active, is_global, created_at, updated_at"
)
