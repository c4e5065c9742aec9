# Routes package init
"""
PromptShelf Backend: API Routes
=================================

Route Inventory:
    - prompts.py: POST /api/prompts, GET /api/prompts (x-api-key required)
    - health.py:  GET /health (no auth)
"""
