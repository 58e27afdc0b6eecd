# Supabase table: admin_users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

admin_users:
- id: uuid (primary key, default: gen_random_uuid())
- email: text (unique, not null)
- password_hash: text (not null) - bcrypt
- name: text (nullable)
- is_active: boolean (default: true) - inactive admins cannot log in
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Admins are a separate credential space from users; their sessions live in
admin_sessions (see app/modules/sessions/models.py).
"""
