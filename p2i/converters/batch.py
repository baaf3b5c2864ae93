"""
Batch Postman to Insomnia converter.

This module provides the conversion orchestration: it reads each input
file, runs the optional preprocess stage, detects whether the document is
a collection or an environment, drives the matching converter and writes
the Insomnia v5 output. A failing file is counted and reported; the
remaining files are still converted.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..config.models import P2IConfig
from ..engine.transform_engine import TransformEngine
from ..parsers.postman_parser import parse_document, detect_document_type, ENVIRONMENT
from ..utils.constants import OUTPUT_SUFFIX, MERGED_OUTPUT_BASENAME, MERGED_COLLECTION_NAME
from ..utils.exceptions import UnsupportedSchemaError
from ..utils.trace_logger import TraceLogger, VerbosityLevel
from .environment import convert_environment
from .insomnia_document import build_document, build_collection_document, write_document
from .postman_importer import PostmanImporter


@dataclass
class ConversionResult:
    """Aggregate outcome of a batch."""
    successful: int = 0
    failed: int = 0
    outputs: List[str] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)


def build_transform_engine(config: P2IConfig) -> Optional[TransformEngine]:
    """Create the engine the settings ask for, or None when no stage runs."""
    transforms = config.transforms
    if not transforms.enabled:
        return None
    if transforms.config_file and Path(transforms.config_file).exists():
        return TransformEngine.from_config_file(transforms.config_file)
    if transforms.config_file:
        print(f"   ⚠️  Transform config not found: {transforms.config_file}, using defaults")
    return TransformEngine()


class BatchConverter:
    """
    Main Postman to Insomnia converter class.

    Args:
        config: Converter settings (output, transforms, import, trace_log)
        transform_engine: Engine to use instead of building one from the
                          settings; it is only read during conversion
    """

    def __init__(self, config: Optional[P2IConfig] = None, transform_engine: Optional[TransformEngine] = None):
        self.config = config or P2IConfig()
        self.transform_engine = transform_engine or build_transform_engine(self.config)

    @property
    def verbose(self) -> bool:
        return self.config.verbose

    def _trace_logger(self) -> TraceLogger:
        trace_config = self.config.trace_log
        if not trace_config.enabled:
            return TraceLogger.disabled()
        return TraceLogger(
            enabled=True,
            verbosity=VerbosityLevel.from_string(trace_config.verbosity),
            output_directory=Path(trace_config.output_directory)
        )

    def convert_text(
        self,
        raw_text: str,
        trace_logger: Optional[TraceLogger] = None
    ) -> Tuple[str, List[Dict[str, Any]]]:
        """
        Convert one document's text to Insomnia records.

        Returns:
            (document type, records)

        Raises:
            CollectionParsingError: If the text is not a JSON object
            UnsupportedSchemaError: If the document is not a supported
                                    collection or environment
        """
        transforms = self.config.transforms
        trace_logger = trace_logger or TraceLogger.disabled()
        engine = self.transform_engine

        if engine is not None and transforms.preprocess:
            if self.verbose:
                print("   🔧 Applying preprocessing transforms...")
            raw_text = engine.preprocess(raw_text, experimental=transforms.experimental)

        document = parse_document(raw_text)
        document_type = detect_document_type(document)
        trace_logger.log_decision("Document type detected", {'type': document_type})

        if document_type == ENVIRONMENT:
            if self.verbose:
                print("   📋 Detected Postman environment file")
            return document_type, convert_environment(document)

        if self.verbose:
            print("   📋 Detected Postman collection file")

        script_engine = engine if (transforms.postprocess or transforms.experimental) else None
        importer = PostmanImporter(
            document,
            script_engine,
            experimental=transforms.experimental,
            use_collection_folder=self.config.importer.use_collection_folder,
            include_response_examples=self.config.importer.include_response_examples,
            trace_logger=trace_logger
        )
        return document_type, importer.import_collection()

    def convert_file(self, input_path: str) -> Tuple[str, List[Dict[str, Any]], TraceLogger]:
        """
        Read and convert one input file.

        Raises:
            P2IError: If the file cannot be parsed or is not supported
            OSError: If the file cannot be read
        """
        trace_logger = self._trace_logger()
        trace_logger.log_decision("Starting conversion", {'input_file': str(input_path)})

        raw_text = Path(input_path).read_text(encoding='utf-8')
        document_type, records = self.convert_text(raw_text, trace_logger)
        if not records:
            raise UnsupportedSchemaError(f"No records produced for {Path(input_path).name}")
        return document_type, records, trace_logger

    def output_path_for(self, input_path: str) -> Path:
        extension = self.config.output.format
        return Path(self.config.output.directory) / f"{Path(input_path).stem}{OUTPUT_SUFFIX}.{extension}"

    def convert_files(self, files: List[str]) -> ConversionResult:
        """
        Convert a batch of files.

        Collections are written one output per input, or into a single
        merged document when output.merge is set. Environments are always
        written to their own file.

        Returns:
            ConversionResult with per-file counts, outputs and errors
        """
        result = ConversionResult()
        output_dir = Path(self.config.output.directory)
        output_dir.mkdir(parents=True, exist_ok=True)
        merged_records: List[Dict[str, Any]] = []
        merged_path = output_dir / f"{MERGED_OUTPUT_BASENAME}{OUTPUT_SUFFIX}.{self.config.output.format}"

        for input_path in files:
            name = Path(input_path).name
            if self.verbose:
                print(f"🔄 Processing: {name}")

            try:
                document_type, records, trace_logger = self.convert_file(input_path)

                if self.config.output.merge and document_type != ENVIRONMENT:
                    merged_records.extend(records)
                    output_path = merged_path
                else:
                    output_path = self.output_path_for(input_path)
                    document = build_document(records, Path(input_path).stem)
                    write_document(document, output_path, self.config.output.format)
                    result.outputs.append(str(output_path))
                    if self.verbose:
                        print(f"   ✅ Converted: {output_path.name}")

                log_path = trace_logger.write_log(str(input_path), str(output_path))
                if log_path and self.verbose:
                    print(f"   📝 Trace log written: {log_path}")

                result.successful += 1

            except Exception as e:
                print(f"❌ Failed to convert {name}: {e}")
                result.failed += 1
                result.errors.append((str(input_path), str(e)))

        if merged_records:
            document = build_collection_document(merged_records, MERGED_COLLECTION_NAME)
            write_document(document, merged_path, self.config.output.format)
            result.outputs.append(str(merged_path))
            if self.verbose:
                print(f"   ✅ Merged {len(merged_records)} records into {merged_path.name}")

        return result
