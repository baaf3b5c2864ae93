"""
Data models for postman2insomnia configuration management.

This module provides structured data classes for the converter settings
(p2i_config.json) and for the transform rule configuration.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional
from ..utils.exceptions import ConfigurationError
from ..utils.constants import DEFAULT_OUTPUT_DIR, DEFAULT_OUTPUT_FORMAT, OUTPUT_FORMATS


@dataclass
class TransformRule:
    """
    A named regex substitution applied to script or collection text.

    Patterns and replacement templates are written in ECMAScript syntax
    ($1, $<name>, $&) so that rule files stay interchangeable with the
    Node.js tooling that produced them.
    """
    name: str
    description: str
    pattern: str
    replacement: str
    flags: str = "g"
    enabled: bool = True
    fixpoint: bool = False

    @classmethod
    def from_dict(cls, rule_dict: Dict[str, Any]) -> 'TransformRule':
        """
        Create a TransformRule from a parsed JSON object.

        Args:
            rule_dict: Dictionary with at least name, pattern and replacement

        Returns:
            TransformRule instance

        Raises:
            ConfigurationError: If the rule is not an object or a required
                                field is missing or not a string
        """
        if not isinstance(rule_dict, dict):
            raise ConfigurationError(f"Transform rule must be an object, got {type(rule_dict).__name__}")

        for key in ('name', 'pattern', 'replacement'):
            if not isinstance(rule_dict.get(key), str):
                raise ConfigurationError(f"Transform rule missing required string field '{key}': {rule_dict}")

        flags = rule_dict.get('flags')
        return cls(
            name=rule_dict['name'],
            description=rule_dict.get('description', '') or '',
            pattern=rule_dict['pattern'],
            replacement=rule_dict['replacement'],
            flags='g' if flags is None else str(flags),
            enabled=rule_dict.get('enabled', True) is not False,
            fixpoint=bool(rule_dict.get('fixpoint', False))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the rule for export; fixpoint is written only when set."""
        rule = {
            'name': self.name,
            'description': self.description,
            'pattern': self.pattern,
            'replacement': self.replacement,
            'flags': self.flags,
            'enabled': self.enabled,
        }
        if self.fixpoint:
            rule['fixpoint'] = True
        return rule


@dataclass
class TransformConfig:
    """Ordered pre-process and post-process rule lists."""
    preprocess: List[TransformRule] = field(default_factory=list)
    postprocess: List[TransformRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any],
                  defaults: Optional['TransformConfig'] = None) -> 'TransformConfig':
        """
        Create a TransformConfig from a parsed JSON object.

        Unknown top-level keys (_comment, _documentation, ...) are ignored.
        A list that is absent falls back to the matching list of `defaults`.

        Raises:
            ConfigurationError: If the root is not an object, a rule list is
                                not an array, or a rule is malformed
        """
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Transform configuration must be a JSON object")

        lists = {}
        for phase in ('preprocess', 'postprocess'):
            if phase not in config_dict:
                lists[phase] = list(getattr(defaults, phase)) if defaults else []
                continue
            rules = config_dict[phase]
            if not isinstance(rules, list):
                raise ConfigurationError(f"Transform configuration '{phase}' must be an array")
            lists[phase] = [TransformRule.from_dict(rule) for rule in rules]

        return cls(preprocess=lists['preprocess'], postprocess=lists['postprocess'])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'preprocess': [rule.to_dict() for rule in self.preprocess],
            'postprocess': [rule.to_dict() for rule in self.postprocess],
        }


@dataclass
class OutputConfig:
    """Configuration for output file settings."""
    directory: Path = Path(DEFAULT_OUTPUT_DIR)
    format: str = DEFAULT_OUTPUT_FORMAT
    merge: bool = False

    def validate(self) -> None:
        """
        Validate output configuration.

        Raises:
            ConfigurationError: If the output format is not yaml or json
        """
        if self.format not in OUTPUT_FORMATS:
            raise ConfigurationError(f"Invalid output format: {self.format}. Must be one of {OUTPUT_FORMATS}")


@dataclass
class TransformsConfig:
    """Which transform stages run, and where their rules come from."""
    preprocess: bool = False
    postprocess: bool = False
    experimental: bool = False
    config_file: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self.preprocess or self.postprocess or self.experimental


@dataclass
class ImportConfig:
    """Importer options."""
    use_collection_folder: bool = False
    include_response_examples: bool = False


@dataclass
class TraceLogConfig:
    """Configuration for trace logging settings."""
    enabled: bool = False
    verbosity: str = "normal"  # minimal, normal, detailed, debug
    output_directory: str = "trace_logs"

    def validate(self) -> None:
        """
        Validate trace log configuration.

        Raises:
            ConfigurationError: If verbosity level is invalid
        """
        valid_levels = ["minimal", "normal", "detailed", "debug"]
        if self.verbosity.lower() not in valid_levels:
            raise ConfigurationError(f"Invalid verbosity level: {self.verbosity}. Must be one of {valid_levels}")


@dataclass
class P2IConfig:
    """Main configuration class containing all config sections."""
    output: OutputConfig = field(default_factory=OutputConfig)
    transforms: TransformsConfig = field(default_factory=TransformsConfig)
    importer: ImportConfig = field(default_factory=ImportConfig)
    trace_log: TraceLogConfig = field(default_factory=TraceLogConfig)
    verbose: bool = False

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'P2IConfig':
        """
        Create P2IConfig from dictionary (parsed from JSON).

        Every section is optional; missing keys take their defaults.

        Raises:
            ConfigurationError: If the root is not an object or a section
                                holds an invalid value
        """
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration root must be a JSON object")

        output_section = config_dict.get('output', {})
        output = OutputConfig(
            directory=Path(output_section.get('directory', DEFAULT_OUTPUT_DIR)),
            format=output_section.get('format', DEFAULT_OUTPUT_FORMAT),
            merge=output_section.get('merge', False)
        )
        output.validate()

        transforms_section = config_dict.get('transforms', {})
        transforms = TransformsConfig(
            preprocess=transforms_section.get('preprocess', False),
            postprocess=transforms_section.get('postprocess', False),
            experimental=transforms_section.get('experimental', False),
            config_file=transforms_section.get('config_file')
        )

        import_section = config_dict.get('import', {})
        importer = ImportConfig(
            use_collection_folder=import_section.get('use_collection_folder', False),
            include_response_examples=import_section.get('include_response_examples', False)
        )

        trace_log_section = config_dict.get('trace_log', {})
        trace_log = TraceLogConfig(
            enabled=trace_log_section.get('enabled', False),
            verbosity=trace_log_section.get('verbosity', 'normal'),
            output_directory=trace_log_section.get('output_directory', 'trace_logs')
        )
        trace_log.validate()

        return cls(
            output=output,
            transforms=transforms,
            importer=importer,
            trace_log=trace_log,
            verbose=config_dict.get('verbose', False)
        )
