"""
BE_Libs - Banner Edit Library Modules

This package contains the core functionality of the banner text
replacement engine, organized into specialized sub-packages:

- ImageEditingLib: Data models, background sampling, text rendering and image I/O
- RegionLib: Text region localization (recognition, classification, strategies)
- EditorLib: Edit orchestration, batch editing and campaign values
- TemplateStoreLib: Coordinate template persistence
"""

__version__ = "0.1.0"
