"""
Transform engine for postman2insomnia.

Applies ordered lists of regex rules to text: the preprocess list runs over
the raw collection JSON before parsing, the postprocess list over every
script after the pm.* to insomnia.* rename. Rules are written in
ECMAScript regex syntax; this module translates patterns, flags and
replacement templates to their Python equivalents.
"""

import json
import re
from typing import Any, Callable, Dict, List, Optional, Union

from ..config.loader import ConfigLoader
from ..config.models import TransformRule, TransformConfig
from ..config.transform_rules import (
    default_transform_config,
    experimental_rules,
    build_sample_config,
)
from ..utils.constants import MAX_FIXPOINT_PASSES
from ..utils.exceptions import ConfigurationError, ValidationError

PHASES = ('preprocess', 'postprocess')

# ECMAScript flag -> Python re flag; None means accepted without effect
REGEX_FLAGS = {
    'g': None,
    'i': re.IGNORECASE,
    'm': re.MULTILINE,
    's': re.DOTALL,
    'u': None,
}

_NAMED_GROUP = re.compile(r'(?<!\\)\(\?<(?![=!])')
_NAMED_BACKREF = re.compile(r'\\k<([A-Za-z_$][\w$]*)>')
_REPLACEMENT_TOKEN = re.compile(r"\$(\$|&|`|'|<[^>]*>|\d{1,2})")


def compile_rule_pattern(pattern: str, flags: str = 'g') -> re.Pattern:
    """
    Compile an ECMAScript-style pattern with its flag string.

    Args:
        pattern: Regex source (named groups may use (?<name>...))
        flags: Flag characters, e.g. 'g', 'gi', 'gm'

    Returns:
        Compiled Python pattern

    Raises:
        ValueError: If the flag string contains an unsupported flag
        re.error: If the pattern does not compile
    """
    re_flags = 0
    for flag in flags:
        if flag not in REGEX_FLAGS:
            raise ValueError(f"Unsupported regex flag '{flag}'")
        if REGEX_FLAGS[flag] is not None:
            re_flags |= REGEX_FLAGS[flag]

    python_pattern = _NAMED_GROUP.sub('(?P<', pattern)
    python_pattern = _NAMED_BACKREF.sub(r'(?P=\1)', python_pattern)
    return re.compile(python_pattern, re_flags)


def make_replacer(template: str) -> Callable[[re.Match], str]:
    """
    Build a re.sub callback expanding an ECMAScript replacement template.

    Supported tokens: $$, $&, $`, $', $1..$99 and $<name>. Groups that did
    not participate in the match expand to an empty string; tokens that
    refer to a group the pattern does not have are left as literal text.
    """
    def expand(match: re.Match) -> str:
        group_count = match.re.groups
        named = match.re.groupindex

        def token(m: re.Match) -> str:
            tok = m.group(1)
            if tok == '$':
                return '$'
            if tok == '&':
                return match.group(0)
            if tok == '`':
                return match.string[:match.start()]
            if tok == "'":
                return match.string[match.end():]
            if tok.startswith('<'):
                name = tok[1:-1]
                if not named:
                    return m.group(0)
                return (match.group(name) or '') if name in named else ''
            # Two-digit reference wins only when that group exists
            if len(tok) == 2 and 0 < int(tok) <= group_count:
                return match.group(int(tok)) or ''
            index = int(tok[0])
            if 0 < index <= group_count:
                return (match.group(index) or '') + tok[1:]
            return m.group(0)

        return _REPLACEMENT_TOKEN.sub(token, template)

    return expand


def apply_rule(rule: TransformRule, text: str) -> str:
    """
    Apply one rule to text; exceptions propagate to the caller.

    A 'g' flag replaces every match, otherwise only the first. Fixpoint
    rules are re-applied until the output stops changing.
    """
    regex = compile_rule_pattern(rule.pattern, rule.flags)
    count = 0 if 'g' in rule.flags else 1
    replacer = make_replacer(rule.replacement)

    passes = MAX_FIXPOINT_PASSES if rule.fixpoint else 1
    for _ in range(passes):
        transformed = regex.sub(replacer, text, count=count)
        if transformed == text:
            break
        text = transformed
    return text


class TransformEngine:
    """
    Ordered preprocess / postprocess rule pipeline.

    An instance may be shared by many conversions; its rule lists only
    change through add_rule / toggle_rule.
    """

    def __init__(self, config: Optional[TransformConfig] = None):
        config = config if config is not None else default_transform_config()
        self.rules: Dict[str, List[TransformRule]] = {
            'preprocess': list(config.preprocess),
            'postprocess': list(config.postprocess),
        }
        self.experimental: Dict[str, List[TransformRule]] = {
            phase: experimental_rules(phase) for phase in PHASES
        }

    @classmethod
    def from_config_file(cls, config_path: str) -> 'TransformEngine':
        """
        Create an engine from a transform configuration file.

        Never raises: an unreadable or malformed file produces a warning
        and an engine with the built-in rules.
        """
        try:
            config = ConfigLoader.load_transform_config(config_path, defaults=default_transform_config())
        except ConfigurationError as e:
            print(f"   ⚠️  Failed to load transform config from {config_path}, using defaults: {e}")
            return cls()

        print(f"📋 Loaded transform config from {config_path}: "
              f"{len(config.preprocess)} preprocess, {len(config.postprocess)} postprocess rules")
        return cls(config)

    @property
    def preprocess_rules(self) -> List[TransformRule]:
        return self.rules['preprocess']

    @property
    def postprocess_rules(self) -> List[TransformRule]:
        return self.rules['postprocess']

    def preprocess(self, text: str, experimental: bool = False) -> str:
        """Apply preprocess rules to raw collection text."""
        return self._apply('preprocess', text, experimental)

    def postprocess(self, text: str, experimental: bool = False) -> str:
        """Apply postprocess rules to a converted script."""
        return self._apply('postprocess', text, experimental)

    def _apply(self, phase: str, text: str, experimental: bool) -> str:
        rules = self.rules[phase]
        if experimental:
            rules = rules + self.experimental[phase]

        transformed = text
        for rule in rules:
            if not rule.enabled:
                continue
            try:
                transformed = apply_rule(rule, transformed)
            except (re.error, ValueError, IndexError, TypeError, RecursionError) as e:
                print(f"   ⚠️  Failed to apply {phase} rule \"{rule.name}\": {e}")
        return transformed

    def add_rule(self, rule: Union[TransformRule, Dict[str, Any]], phase: str = 'postprocess') -> TransformRule:
        """
        Append a rule to a phase's list.

        Args:
            rule: TransformRule or a rule dictionary
            phase: 'preprocess' or 'postprocess'

        Returns:
            The appended TransformRule

        Raises:
            ValidationError: If the phase is unknown or the name is already
                             used in that list
            ConfigurationError: If a rule dictionary is malformed
        """
        if phase not in PHASES:
            raise ValidationError(f"Unknown transform phase: {phase}")
        if isinstance(rule, dict):
            rule = TransformRule.from_dict(rule)
        if any(existing.name == rule.name for existing in self.rules[phase]):
            raise ValidationError(f"Rule '{rule.name}' already exists in {phase} rules")

        self.rules[phase].append(rule)
        return rule

    def add_preprocess_rule(self, rule: Union[TransformRule, Dict[str, Any]]) -> TransformRule:
        return self.add_rule(rule, 'preprocess')

    def add_postprocess_rule(self, rule: Union[TransformRule, Dict[str, Any]]) -> TransformRule:
        return self.add_rule(rule, 'postprocess')

    def toggle_rule(self, rule_name: str, enabled: bool) -> bool:
        """
        Enable or disable every rule with this name, in both phases and in
        the experimental tier.

        Returns:
            True if at least one rule matched
        """
        found = False
        for tier in (self.rules, self.experimental):
            for phase in PHASES:
                for rule in tier[phase]:
                    if rule.name == rule_name:
                        rule.enabled = enabled
                        found = True
        return found

    def get_config(self) -> TransformConfig:
        return TransformConfig(preprocess=list(self.preprocess_rules),
                               postprocess=list(self.postprocess_rules))

    def export_config(self) -> str:
        """Serialize both rule lists, disabled rules included, as JSON."""
        return json.dumps(self.get_config().to_dict(), indent=2)

    def save_config(self, file_path: str) -> None:
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(self.export_config())


def generate_sample_config(output_path: str, experimental: bool = False) -> Dict[str, Any]:
    """
    Write a commented sample transform configuration built from the
    default rules.

    Args:
        output_path: Destination JSON file
        experimental: Include the experimental rules

    Returns:
        The written configuration dictionary
    """
    sample = build_sample_config(experimental=experimental)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2)

    print(f"✅ Sample config generated at: {output_path}")
    print(f"📝 Config contains {len(sample['preprocess'])} preprocessing rules")
    print(f"📝 Config contains {len(sample['postprocess'])} postprocessing rules")
    if experimental:
        print("🧪 Experimental rules included; they only run with --experimental.")
    print("🔧 Edit this file to customize transformation rules.")
    print("💡 Set \"enabled\": false to disable rules without deleting them.")
    return sample
