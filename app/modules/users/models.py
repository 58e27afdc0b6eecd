# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, default: gen_random_uuid())
- email: text (unique, not null)
- password_hash: text (nullable) - bcrypt, never returned by the API
- name: text (nullable)
- avatar_url: text (nullable)
- email_verified: boolean (default: false) - admin-created users are verified
- webhook_url: text (nullable) - per-user webhook, checked with /admin/webhook/test
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Users are created and managed by admins only. Deleting a user removes, in
order: project files, sub-projects, projects, sessions, agent assignments
(user_agents), user_supabase_config, then the user row.
"""
