from .seeder import SeedReport, run_seeders, seed_admin_role, seed_admin_user, seed_permissions

__all__ = ["SeedReport", "run_seeders", "seed_admin_role", "seed_admin_user", "seed_permissions"]
