from bulkgen.generation.base import BaseGenerationClient
from bulkgen.generation.factory import GeneratorFactory
from bulkgen.generation.generator import Generator

__all__ = ["BaseGenerationClient", "Generator", "GeneratorFactory"]
