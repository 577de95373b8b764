from __future__ import annotations

import posixpath
import re
from typing import List, Sequence, Set

from rnconvert.conversion.models import ManifestEntry

ENTRY_POINT_FILENAME = 'index.js'
ROOT_CONTAINER_FILENAME = 'App.js'
UNNAMED_COMPONENT = 'UnnamedComponent'

NAME_SEPARATORS = re.compile(r'[^0-9A-Za-z]+')
NUMERIC_PREFIX = 'Screen'

ENTRY_POINT_TEMPLATE = """import { AppRegistry } from 'react-native';
import App from './App';
import { name as appName } from './app.json';

AppRegistry.registerComponent(appName, () => App);
"""

PLACEHOLDER_TEMPLATE = """import React from 'react';
import { Text, SafeAreaView } from 'react-native';

const App = () => (
  <SafeAreaView style={{flex: 1, justifyContent: 'center', alignItems: 'center'}}>
    <Text>No screens were converted to create a navigator.</Text>
  </SafeAreaView>
);

export default App;
"""

NAVIGATOR_TEMPLATE = """import * as React from 'react';
import {{ NavigationContainer }} from '@react-navigation/native';
import {{ createStackNavigator }} from '@react-navigation/stack';

{imports}

const Stack = createStackNavigator();

function App() {{
  return (
    <NavigationContainer>
      <Stack.Navigator initialRouteName="{initial_route}">
{screens}
      </Stack.Navigator>
    </NavigationContainer>
  );
}}

export default App;
"""


def create_entry_point() -> str:
  return ENTRY_POINT_TEMPLATE


def display_name(output_path: str) -> str:
  """``src/screens/user-profile.jsx`` -> ``UserProfile``, ``404.jsx`` -> ``Screen404``."""
  if not output_path:
    return UNNAMED_COMPONENT
  stem = posixpath.splitext(posixpath.basename(output_path))[0]
  name = ''.join(segment[:1].upper() + segment[1:] for segment in NAME_SEPARATORS.split(stem))
  if not name:
    return UNNAMED_COMPONENT
  if name[0].isdigit():
    return NUMERIC_PREFIX + name
  return name


def unique_names(paths: Sequence[str]) -> List[str]:
  """Display names in order, suffixing repeats (``Home``, ``Home2``)."""
  names: List[str] = []
  taken: Set[str] = set()
  for path in paths:
    base = display_name(path)
    name, counter = base, 1
    while name in taken:
      counter += 1
      name = f'{base}{counter}'
    taken.add(name)
    names.append(name)
  return names


def _import_path(output_path: str) -> str:
  return f'./{output_path}'


def create_root_navigator(screens: Sequence[ManifestEntry]) -> str:
  """Builds App.js from succeeded screens in manifest order; the first one is the initial route."""
  routed: List[ManifestEntry] = [screen for screen in screens if screen.output_path]
  if not routed:
    return PLACEHOLDER_TEMPLATE
  names = unique_names([screen.output_path for screen in routed])
  imports = '\n'.join(
    f"import {name} from '{_import_path(screen.output_path)}';"
    for name, screen in zip(names, routed)
  )
  registrations = '\n'.join(
    f'        <Stack.Screen name="{name}" component={{{name}}} />'
    for name in names
  )
  return NAVIGATOR_TEMPLATE.format(imports=imports, initial_route=names[0], screens=registrations)
