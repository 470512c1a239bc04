from svc_crud.db.nosql.migrations import CollectionMigration

migration = CollectionMigration("homeslider")
