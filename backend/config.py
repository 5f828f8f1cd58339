"""Configuration management for the PDF Chat RAG backend."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")  # "text" or "json"
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

# Model Configuration
EMBEDDING_MODEL = "sentence-transformers/all-mpnet-base-v2"
SIMPLE_MODEL = "llama-3.1-8b-instant"
COMPLEX_MODEL = "llama-3.3-70b-versatile"

# Chunking Configuration
CHUNK_SIZE = 120  # tokens (~500 characters)
CHUNK_OVERLAP = 12  # tokens

# Retrieval Configuration
RETRIEVAL_TOP_K = 10
RELEVANCE_THRESHOLD = 0.3

# Ranking Configuration
MAX_CONTEXT_SENTENCES = 7
MIN_SENTENCE_LENGTH = 10  # characters
MIN_KEYWORD_LENGTH = 4  # query words of 3 chars or fewer are ignored

# Answer Configuration
MIN_ANSWER_LENGTH = 50  # characters, shorter answers trigger one retry

# Indexing Configuration
INDEX_BATCH_SIZE = 20
INDEX_MAX_RETRIES = 10
INDEX_RETRY_DELAY = 5.0  # seconds, multiplied by the attempt number

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
