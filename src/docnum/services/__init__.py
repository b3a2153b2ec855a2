"""Service layer — numbering orchestration and the ServiceResult facade.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
