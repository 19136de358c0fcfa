# pocketdrive HTTP API layer
# Created: 2026-10-16
#
# Versioned REST endpoints for the host admin UI, mounted at /api/v1/.
