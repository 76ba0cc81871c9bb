# Supabase tables: profiles, user_roles
# This file documents the expected database schema
# Reads are handled via the Supabase SDK in role_source.py; this service never writes

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (not null, unique)
- full_name: text (nullable)
- is_active: boolean (default: true) - inactive profiles resolve to guest
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- role: text (not null) - one of 'user', 'moderator', 'admin', 'super_admin'
- granted_by: uuid (foreign key to profiles.id, nullable)
- granted_at: timestamp (default: now())
- expires_at: timestamp (nullable) - grant stops counting once passed
- is_active: boolean (default: true)
- unique constraint on (user_id, role)
"""
