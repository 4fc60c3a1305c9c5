# Services package init
"""
EventSnap Backend — Services Layer
=====================================

Service Inventory:
    - VisionService (abstract): image → answer text
    - DashScopeService: concrete VisionService on DashScope / Qwen-VL
    - response_parser: answer payload → text → ExtractionResult
    - ExtractionService: orchestrates one /api/process cycle
"""
