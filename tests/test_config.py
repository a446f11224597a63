"""
Tests for optimizer configuration parsing and repair.
"""

import logging

import pytest

from streamfuse.core.config import LogLevel, OptimizerConfig


class TestLogLevel:
    @pytest.mark.parametrize('value,expected', [
        ('basic', LogLevel.BASIC),
        ('Detailed', LogLevel.DETAILED),
        (' verbose ', LogLevel.VERBOSE),
        (LogLevel.VERBOSE, LogLevel.VERBOSE),
    ])
    def test_parse(self, value, expected):
        assert LogLevel.parse(value) is expected

    @pytest.mark.parametrize('value', ['loud', '', None, 3])
    def test_parse_invalid(self, value):
        assert LogLevel.parse(value) is None


class TestOptimizerConfig:
    def test_defaults(self):
        config = OptimizerConfig()
        assert config.enable_tracing is False
        assert config.max_iterations == 10
        assert config.log_level is LogLevel.BASIC
        assert config.trace_to_console is False

    def test_from_mapping_camel_case(self):
        config = OptimizerConfig.from_mapping({
            'enableTracing': True,
            'maxIterations': 3,
            'logLevel': 'verbose',
            'traceToConsole': True,
        })
        assert config == OptimizerConfig(
            enable_tracing=True,
            max_iterations=3,
            log_level=LogLevel.VERBOSE,
            trace_to_console=True,
        )

    def test_from_mapping_snake_case_and_partial(self):
        config = OptimizerConfig.from_mapping({'max_iterations': 0})
        assert config.max_iterations == 0
        assert config.enable_tracing is False

    def test_from_mapping_empty(self):
        assert OptimizerConfig.from_mapping(None) == OptimizerConfig()
        assert OptimizerConfig.from_mapping({}) == OptimizerConfig()

    def test_unknown_keys_ignored(self, caplog):
        caplog.set_level(logging.DEBUG, logger='streamfuse.core.config')
        config = OptimizerConfig.from_mapping({'enableTracing': True, 'colour': 'blue'})
        assert config.enable_tracing is True
        assert 'colour' in caplog.text

    @pytest.mark.parametrize('iterations', [-1, 2.5, '4', True])
    def test_bad_max_iterations_repaired(self, iterations, caplog):
        with caplog.at_level(logging.WARNING, logger='streamfuse.core.config'):
            config = OptimizerConfig(max_iterations=iterations)
        assert config.max_iterations == 10
        assert 'max_iterations' in caplog.text

    def test_bad_flags_repaired(self, caplog):
        with caplog.at_level(logging.WARNING, logger='streamfuse.core.config'):
            config = OptimizerConfig.from_mapping({'enableTracing': 'yes', 'traceToConsole': 1})
        assert config.enable_tracing is False
        assert config.trace_to_console is False
        assert 'enable_tracing' in caplog.text
        assert 'trace_to_console' in caplog.text

    def test_bad_log_level_repaired(self, caplog):
        with caplog.at_level(logging.WARNING, logger='streamfuse.core.config'):
            config = OptimizerConfig(log_level='shouty')
        assert config.log_level is LogLevel.BASIC
        assert 'shouty' in caplog.text

    def test_string_log_level_parsed(self):
        assert OptimizerConfig(log_level='detailed').log_level is LogLevel.DETAILED

    def test_coerce(self):
        config = OptimizerConfig(enable_tracing=True)
        assert OptimizerConfig.coerce(config) is config
        assert OptimizerConfig.coerce(None) == OptimizerConfig()
        assert OptimizerConfig.coerce({'maxIterations': 2}).max_iterations == 2

    @pytest.mark.parametrize('config', [['maxIterations', 2], 'verbose', 42])
    def test_coerce_non_mapping_uses_defaults(self, config, caplog):
        with caplog.at_level(logging.WARNING, logger='streamfuse.core.config'):
            coerced = OptimizerConfig.coerce(config)
        assert coerced == OptimizerConfig()
        assert 'Invalid config' in caplog.text

    def test_with_changes(self):
        base = OptimizerConfig()
        changed = base.with_changes(max_iterations=1)
        assert changed.max_iterations == 1
        assert base.max_iterations == 10

    def test_frozen(self):
        with pytest.raises(AttributeError):
            OptimizerConfig().max_iterations = 5
