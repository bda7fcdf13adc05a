from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    # Source tree
    source_path: str = "./gsrc"
    source_extensions: list[str] = [".gs", ".gsx", ".gst"]
    exclude_dirs: list[str] = ["node_modules", ".git", "dist", "build", ".idea", ".vscode"]
    max_depth: int = -1

    # Chunking
    chunk_size: int = 4000
    chunk_overlap: int = 200
    chunk_hard_limit: int = 30000

    # Orchestration
    file_batch_size: int = 50
    embedding_concurrency: int = 5

    # Embeddings
    embedding_provider: str = "sentence_transformers"
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_batch_size: int = 32
    embedding_document_prefix: str = ""
    embedding_query_prefix: str = ""
    openai_api_key: str = ""
    ollama_host: str = "http://localhost:11434"

    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "guidewire-code"

    # State
    hash_cache_path: str = ".rag-cache.json"
    ingestion_db_path: str = "./ingestion.db"
    evict_stale_chunks: bool = True

    # Grammars
    gosu_grammar_module: str = "tree_sitter_gosu"
    gosu_template_grammar_module: str = "tree_sitter_gosu_template"
    gosu_semantic_units: list[str] = [
        "class_declaration",
        "interface_declaration",
        "enum_declaration",
        "enhancement_declaration",
        "function_declaration",
        "method_declaration",
        "constructor_declaration",
        "property_declaration",
    ]
    gosu_template_semantic_units: list[str] = ["directive", "scriptlet", "expression", "declaration"]

    rag_top_k: int = 10
    rag_min_score: float = 0.0

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
