"""
Retrieval augmented query service.

Retrieves ranked documents from the vector store, assembles a context-bound
prompt and hands it to the answer generator chosen at construction. The
query path never raises; failures come back as RAGResponse.error.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Iterable, List, Mapping, Optional, Union

from ..agents.generator import AnswerGenerator, GenerationUnavailableError
from ..agents.local_summarizer import LocalFallbackSummarizer
from ..core import config
from ..vector.index import IVectorStore
from ..vector.types import SearchResult
from .prompts import ERROR_ANSWER, NO_RESULTS_ANSWER, build_context, build_prompt
from .schemas import RAGQueryOptions, RAGResponse, SourceDocument
from util.logging import logger

_UNSET = object()


class RetrievalAugmentedQueryService:
    """
    Combines vector store retrieval with an answer generator.

    Holds no state between calls beyond its references to the shared store,
    the generator, and the fallback summarizer.
    """

    def __init__(self, vector_store: IVectorStore, generator: Optional[AnswerGenerator] = None,
                 fallback: Optional[AnswerGenerator] = None, generation_timeout_sec: Any = _UNSET):
        """
        Args:
            vector_store: Store shared with the rest of the process
            generator: Answer strategy; defaults to the configured one
            fallback: Used when the generator is unavailable or times out
            generation_timeout_sec: Seconds to wait for the generator, None for no limit;
                defaults to GENERATION_TIMEOUT_SEC
        """
        self.vector_store = vector_store
        self.generator = generator or config.get_answer_generator()
        self.fallback = fallback or LocalFallbackSummarizer()
        self.generation_timeout_sec = (
            config.get_generation_timeout() if generation_timeout_sec is _UNSET else generation_timeout_sec
        )

    def query(self, options: Union[RAGQueryOptions, Mapping[str, Any]]) -> RAGResponse:
        """
        Answer a question from the documents of one collection.

        1. Retrieve the top_k documents matching the filter
        2. Build a context block and prompt from them
        3. Generate the answer, falling back to the local summarizer
        """
        collection_name = None
        query_text = ""
        try:
            if not isinstance(options, RAGQueryOptions):
                options = RAGQueryOptions(**options)
            collection_name = options.collection_name
            query_text = options.query

            results = self.vector_store.query(
                options.collection_name,
                options.query,
                top_k=options.top_k,
                filter=options.filter,
            )

            if not results:
                logger.log_rag_query(collection_name, query_text, 0, "none")
                return RAGResponse(answer=NO_RESULTS_ANSWER, source_documents=[])

            prompt = build_prompt(build_context(results), options.query)
            answer, strategy = self._generate(prompt, results, options.max_tokens)

            logger.log_rag_query(collection_name, query_text, len(results), strategy)
            return RAGResponse(
                answer=answer,
                source_documents=[SourceDocument.from_result(r) for r in results] if options.include_content else None,
            )

        except Exception as e:
            logger.log_rag_query(collection_name or "", query_text, 0, self.generator.name, status="failed")
            logger.error(f"RAG query error: {e}", exc_info=config.debug_enabled())
            return RAGResponse(answer=ERROR_ANSWER, error=str(e))

    def list_collections(self) -> List[str]:
        """Get a list of all available collections in the vector store."""
        return self.vector_store.list_collections()

    def ingest_documents(self, collection_name: str, documents: Iterable[Mapping[str, Any]]) -> List[str]:
        """
        Add domain knowledge to a collection so it can be retrieved by queries.
        Creates the collection first when it is not listed.
        """
        if collection_name not in self.vector_store.list_collections():
            self.vector_store.create_collection(collection_name)

        return self.vector_store.upsert(collection_name, documents)

    def _generate(self, prompt: str, results: List[SearchResult], max_tokens: int):
        """Run the generator, degrading to the fallback. Returns (answer, strategy name)."""
        try:
            return self._call_generator(prompt, results, max_tokens), self.generator.name
        except GenerationUnavailableError as e:
            logger.log_generation_fallback(self.generator.name, str(e))
        except FutureTimeoutError:
            logger.log_generation_fallback(
                self.generator.name, f"timed out after {self.generation_timeout_sec}s"
            )

        return self.fallback.generate_answer(prompt, results, max_tokens), self.fallback.name

    def _call_generator(self, prompt: str, results: List[SearchResult], max_tokens: int) -> str:
        if self.generation_timeout_sec is None or isinstance(self.generator, LocalFallbackSummarizer):
            return self.generator.generate_answer(prompt, results, max_tokens)

        # Fresh single-worker pool per call; a hung generator keeps only its own thread
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rag-generate")
        try:
            future = executor.submit(self.generator.generate_answer, prompt, results, max_tokens)
            return future.result(timeout=self.generation_timeout_sec)
        finally:
            executor.shutdown(wait=False)
