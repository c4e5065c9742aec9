# Services package init
"""
PromptShelf Backend: Services Layer
=====================================

Service Inventory:
    - GitHubImageUploader: commits base64 images through the GitHub contents API
    - PromptService: validate → upload → persist orchestration, tag-filtered listing
"""
