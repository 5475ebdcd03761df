"""Service layer: one service per domain component, all returning ServiceResult."""
