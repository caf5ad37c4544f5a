"""
RequestDesk synchronization components.

Modules:
    client: HTTP client for the RequestDesk public API
    importer: Imports one page of remote posts (ImportOrchestrator)
    exporter: Sends catalog products to the knowledge base (ExportOrchestrator)
    data_export: Catalog data pulled by RequestDesk
    post_management: Product links and sync status of local posts
    catalog_source: Read access to products, categories and CMS pages
    run_log: Audit rows for finished runs
    scheduler: APScheduler job for the periodic post import

Subpackages:
    transformers: Entity → document conversion, slug and HTML helpers
    loaders: Post repository and the external-id reconciler

Control flow:
    ImportOrchestrator → RequestDeskClient.fetch_posts → SyncReconciler.upsert
        → RequestDeskClient.report_sync_status
    ExportOrchestrator → CatalogSource → EntityTransformer
        → RequestDeskClient.send_documents

Usage:
    config = RequestDeskConfig.from_settings()
    async with async_session_maker() as session:
        result = await ImportOrchestrator(session, config).import_page(page=1, per_page=20)
        print(f"{result.created_count} created, {result.failed_count} failed")
"""
