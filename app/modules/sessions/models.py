# Supabase tables: sessions, admin_sessions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

sessions:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (foreign key to users.id, not null, on delete cascade)
- token: text (unique, not null) - the signed JWT handed out as the auth_token cookie
- expires_at: timestamptz (not null)
- created_at: timestamptz (default: now())

admin_sessions:
- id: uuid (primary key, default: gen_random_uuid())
- admin_id: uuid (foreign key to admin_users.id, not null, on delete cascade)
- email: text (not null)
- token: text (unique, not null) - handed out as the admin_session cookie
- expires_at: timestamptz (not null)
- created_at: timestamptz (default: now())

A session is valid only while its JWT verifies AND its row exists with
expires_at in the future. Deleting the row revokes the token.
"""
