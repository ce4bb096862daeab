# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant l'appel à Base.metadata.create_all (voir app.database.init_db).

from app.models.storage_entry import StorageEntry  # noqa: F401
