"""auth/ -- Credential storage, sign-up / sign-in, and token issuance for Gatekeeper.

Layer rule: auth/ imports only stdlib + third-party libraries, plus core/
for Settings. It does NOT import from api/. api/ imports from auth/, not the
other way around.
"""
