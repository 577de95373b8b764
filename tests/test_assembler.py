"""Tests for archive assembly."""

import asyncio
import io
import json
import zipfile

import pytest

from rnconvert.conversion.assembler import ProjectAssembler, pack_archive, select_dependency_manifest
from rnconvert.conversion.classifier import build_manifest
from rnconvert.conversion.models import ConversionReport

from conftest import LOGO_PNG, PACKAGE_JSON, descriptor


def complete(manifest, contents, failures=()):
  for entry in manifest:
    if entry.source_path in failures:
      entry.mark_failed('oracle refused the file')
    else:
      entry.mark_succeeded(contents.get(entry.source_path, f'// {entry.source_path}'))
  return manifest


def read_archive(archive):
  with zipfile.ZipFile(io.BytesIO(archive)) as zf:
    return {name: zf.read(name) for name in zf.namelist()}


class TestProjectAssembler:
  def test_failed_and_stylesheet_entries_are_excluded(self, scenario_descriptors):
    manifest = complete(
      build_manifest(scenario_descriptors),
      {'package.json': PACKAGE_JSON, 'logo.png': LOGO_PNG},
      failures={'src/components/Button.jsx'}
    )
    report = ConversionReport(total_entries=len(manifest))

    files = read_archive(asyncio.run(ProjectAssembler().assemble(manifest, report)))

    assert set(files) == {'package.json', 'index.js', 'App.js', 'src/screens/Home.jsx', 'assets/images/logo.png'}
    assert files['assets/images/logo.png'] == LOGO_PNG
    assert b'initialRouteName="Home"' in files['App.js']
    assert report.manifest_source == 'rules'
    assert report.screens == ['src/screens/Home.jsx']
    assert report.omitted == ['src/components/Button.jsx', 'src/styles/app.css']

  def test_package_json_is_rewritten_not_copied(self, scenario_descriptors):
    manifest = complete(build_manifest(scenario_descriptors), {'package.json': PACKAGE_JSON})
    files = asyncio.run(ProjectAssembler().build_files(manifest))
    package = json.loads(files['package.json'])
    assert 'react-dom' not in package['dependencies']
    assert package['dependencies']['axios'] == '1.6.0'

  def test_last_asset_wins_on_collision(self):
    manifest = complete(
      build_manifest([descriptor('a/logo.png'), descriptor('b/logo.png')]),
      {'a/logo.png': b'first', 'b/logo.png': b'second'}
    )
    files = read_archive(asyncio.run(ProjectAssembler().assemble(manifest)))
    assert files['assets/images/logo.png'] == b'second'

  def test_generated_files_take_precedence(self):
    manifest = complete(
      build_manifest([descriptor('App.js'), descriptor('index.js'), descriptor('src/pages/Home.jsx')]),
      {'App.js': '// web app', 'index.js': '// web index'}
    )
    files = asyncio.run(ProjectAssembler().build_files(manifest))
    assert files['App.js'] != '// web app'
    assert 'NavigationContainer' in files['App.js']
    assert 'AppRegistry' in files['index.js']

  def test_missing_manifest_emits_minimal_package(self):
    manifest = complete(build_manifest([descriptor('src/pages/Home.jsx')]), {})
    report = ConversionReport()
    files = asyncio.run(ProjectAssembler().build_files(manifest, report))
    assert json.loads(files['package.json'])['name'] == 'converted-app'
    assert report.manifest_source == 'minimal'

  def test_failed_manifest_emits_minimal_package(self):
    manifest = complete(build_manifest([descriptor('package.json')]), {}, failures={'package.json'})
    report = ConversionReport()
    asyncio.run(ProjectAssembler().build_files(manifest, report))
    assert report.manifest_source == 'minimal'

  def test_no_successful_screens_gives_placeholder(self):
    manifest = complete(
      build_manifest([descriptor('src/pages/Home.jsx'), descriptor('src/components/Card.jsx')]),
      {},
      failures={'src/pages/Home.jsx'}
    )
    files = asyncio.run(ProjectAssembler().build_files(manifest))
    assert 'No screens were converted' in files['App.js']
    assert 'src/components/Card.jsx' in files

  def test_pending_entries_are_rejected(self):
    manifest = build_manifest([descriptor('src/pages/Home.jsx')])
    with pytest.raises(ValueError):
      asyncio.run(ProjectAssembler().build_files(manifest))

  def test_nested_dependency_manifest_is_not_copied_raw(self):
    web_manifest = '{"name": "shop", "dependencies": {"react": "18.2.0", "react-dom": "18.2.0"}}'
    manifest = complete(
      build_manifest([descriptor('client/package.json'), descriptor('client/src/pages/Home.jsx')]),
      {'client/package.json': web_manifest}
    )
    report = ConversionReport()

    files = asyncio.run(ProjectAssembler().build_files(manifest, report))

    assert 'client/package.json' not in files
    assert json.loads(files['package.json'])['name'] == 'shop'
    assert 'react-dom' not in json.loads(files['package.json'])['dependencies']
    assert report.manifest_source == 'rules'

  def test_other_nested_manifests_keep_their_path(self):
    manifest = complete(
      build_manifest([descriptor('package.json'), descriptor('packages/ui/package.json')]),
      {'package.json': PACKAGE_JSON, 'packages/ui/package.json': '{"name": "ui"}'}
    )
    files = asyncio.run(ProjectAssembler().build_files(manifest))
    assert files['packages/ui/package.json'] == '{"name": "ui"}'
    assert json.loads(files['package.json'])['name'] == 'shop'

  def test_root_package_json_preferred(self):
    manifest = build_manifest([descriptor('packages/ui/package.json'), descriptor('package.json')])
    assert select_dependency_manifest(manifest).source_path == 'package.json'


class TestPackArchive:
  def test_identical_input_identical_bytes(self):
    files = {'App.js': 'x', 'assets/images/logo.png': LOGO_PNG}
    assert pack_archive(files) == pack_archive(dict(files))

  def test_entries_are_deflated(self):
    with zipfile.ZipFile(io.BytesIO(pack_archive({'a.txt': 'a' * 1000}))) as zf:
      info = zf.getinfo('a.txt')
      assert info.compress_type == zipfile.ZIP_DEFLATED
      assert info.compress_size < info.file_size
