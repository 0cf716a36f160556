from grantflow.services.patch.patch_applier import PatchApplier, is_empty

__all__ = ["PatchApplier", "is_empty"]
