# Supabase table: user_supabase_config
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_supabase_config:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (foreign key to users.id, unique, not null)
- supabase_url: text (not null) - Fernet token, see app/core/encryption.py
- supabase_anon_key: text (nullable) - Fernet token
- service_role_secret: text (nullable) - Fernet token
- project_bucket_name: text (default: 'projects')
- is_configured: boolean (default: false)
- use_service_role: boolean (default: false) - which key the connection test uses
- last_verified_at: timestamp (nullable) - stamped by a successful connection test
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Secrets are never returned by the API; status responses only expose
has_service_role.
"""

DEFAULT_BUCKET_NAME = "projects"
