from __future__ import annotations

import re
from typing import Dict

from rnconvert.conversion.mappings import ELEMENT_MAP, EVENT_MAP, WEB_API_MAP
from rnconvert.conversion.models import Role


ROLE_GUIDANCE: Dict[Role, str] = {
  Role.COMPONENT: (
    'This file is a reusable UI component. Keep its props contract and default export; '
    'fold any imported stylesheet rules into a StyleSheet.create() block in the same file.'
  ),
  Role.SCREEN: (
    'This file is a full page. Turn it into a React Native screen wrapped in a SafeAreaView, '
    'use ScrollView when the content can overflow, and replace router links with '
    'navigation.navigate() calls from @react-navigation/native.'
  ),
  Role.HOOK: (
    'This file is a custom React hook. Keep the hook signature and return value identical; '
    'replace browser-only APIs it relies on with React Native equivalents.'
  ),
  Role.UTILITY: (
    'This file is a utility module. It may use browser APIs (window, document, localStorage) '
    'that must be replaced with platform equivalents; leave pure logic untouched.'
  )
}

FENCE_PATTERN = re.compile(r'```[a-zA-Z0-9_\-]*\n([\s\S]*?)```', re.MULTILINE)
LANGUAGE_TAGS = ('javascript', 'typescript', 'jsx', 'tsx', 'js', 'json')


def _mapping_section(mapping: Dict[str, str], wrap_tags: bool = False) -> str:
  if wrap_tags:
    return '\n'.join(f'- <{src}> → <{dst}>' for src, dst in mapping.items())
  return '\n'.join(f'- {src} → {dst}' for src, dst in mapping.items())


def build_conversion_prompt(source: str, role: Role) -> str:
  guidance = ROLE_GUIDANCE.get(role, 'Convert the file faithfully.')
  return f"""You are an expert React Native developer. Convert the provided React (web) code to React Native.

CONTEXT
- This file was identified as a '{role.name}'.
- {guidance}

ELEMENT CONVERSIONS
{_mapping_section(ELEMENT_MAP, wrap_tags=True)}
- Headings become <Text> with an appropriate fontSize; buttons and links wrap their label in <Text>.

EVENT HANDLING
{_mapping_section(EVENT_MAP)}
- Remove browser-only events.

STYLES
- Convert CSS classes to StyleSheet objects with camelCase properties.
- Convert px units to numbers and drop unsupported properties (box-shadow, etc.).
- Use flexbox for layout.

PLATFORM APIS
{_mapping_section(WEB_API_MAP)}

OUTPUT REQUIREMENTS
- Return ONLY the converted code, no explanations.
- Include every React and React Native import the code needs.
- Preserve the module's exports.

ORIGINAL CODE
{source}
"""


def build_manifest_prompt(original: str) -> str:
  return f"""You are an expert React Native developer. Convert the following React (web) 'package.json' file into a valid, runnable 'package.json' for a new React Native project.

Follow these rules precisely:
1. Remove web-only dependencies: 'react-dom', 'react-scripts' and 'web-vitals'.
2. Replace 'react-router-dom' with '@react-navigation/native'.
3. Make sure the final JSON includes 'react-native', '@react-navigation/stack', 'react-native-safe-area-context' and 'react-native-screens'.
4. Keep other compatible libraries like 'axios', 'moment' or 'lodash' with their original versions.
5. Replace the 'scripts' section with the standard React Native commands ('start', 'android', 'ios').
6. Keep original fields like 'name', 'author' and 'license'.
7. Respond with ONLY the raw JSON content of the new package.json. No explanatory text, markdown or backticks.

Original package.json:
{original}
"""


def clean_model_output(text: str) -> str:
  """Strips markdown fences and a leading language tag from a model reply."""
  if not text:
    return ''
  cleaned = text.strip()
  matches = FENCE_PATTERN.findall(cleaned)
  if matches:
    cleaned = matches[0].strip()
  else:
    cleaned = cleaned.replace('```', '').strip()
  first_line, _, rest = cleaned.partition('\n')
  if first_line.strip().lower() in LANGUAGE_TAGS and rest:
    cleaned = rest.strip()
  return cleaned
