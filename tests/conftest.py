import pytest

from gfftab.config import GConfig
from gfftab.reader import read_features
from gfftab.resolver import HierarchyResolver
from gfftab.tables import GTables

def gff_line(chr, feature_type, start, end, strand='+', src='test', frame='.', **attributes):
    attr = ';'.join(f'{k}={v}' for k, v in attributes.items())
    return '\t'.join([chr, src, feature_type, str(start), str(end), '.', strand, frame, attr]) + '\n'

@pytest.fixture
def config():
    return GConfig()

@pytest.fixture
def resolve(config):
    """runs lines through parsing, sorting and resolution; returns the resolver and its frames"""
    def _resolve(lines):
        features, _ = read_features(lines, config)
        tables = GTables(config)
        resolver = HierarchyResolver(tables=tables, config=config)
        resolver.resolve_all(features)
        return resolver, tables.frames()
    return _resolve

@pytest.fixture
def gff_file(tmp_path):
    def _write(lines, name='input.gff3'):
        path = tmp_path / name
        path.write_text('##gff-version 3\n' + ''.join(lines))
        return path
    return _write
