# Platform authentication
# Users are created by admins only; there is no self-registration.
# Credentials live in the users table, sessions in the sessions table
# (see app/modules/sessions/models.py).

"""
Login flow:
- POST /auth/login checks email + bcrypt password_hash from users
- a signed JWT is stored as a row in sessions and set as the HttpOnly
  auth_token cookie
- every protected route validates the cookie (JWT + live session row)
- POST /auth/sign-out deletes the row and clears the cookie
"""
