# Supabase tables: projects, sub_projects, project_files
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

projects:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (foreign key to users.id, not null) - owner
- name: text (not null)
- description: text (nullable)
- icon: text (default: 'folder')
- color: text (default: '#3b82f6')
- sort_order: integer (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

sub_projects:
- id: uuid (primary key, default: gen_random_uuid())
- project_id: uuid (foreign key to projects.id, not null)
- name: text (not null)
- description: text (nullable)
- icon: text (default: 'folder')
- sort_order: integer (default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

project_files:
- id: uuid (primary key, default: gen_random_uuid())
- sub_project_id: uuid (foreign key to sub_projects.id, not null)
- name: text (not null)
- description: text (nullable)
- file_type: text (default: 'text')
- category: text (nullable)
- sub_category: text (nullable)
- content: text (nullable) - the file body
- supabase_storage_path: text (not null) - object path in the user's own Supabase, the file id
- size_bytes: integer (default: 0) - UTF-8 length of content
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Ownership is always resolved through projects.user_id. Children are deleted
explicitly before their parent; the statements are not wrapped in a
transaction.
"""

DEFAULT_ICON = "folder"
DEFAULT_COLOR = "#3b82f6"
DEFAULT_FILE_TYPE = "text"

FILE_SUMMARY_COLUMNS = "id, name, file_type, size_bytes, updated_at, sub_project_id"
