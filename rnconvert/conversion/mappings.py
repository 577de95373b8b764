from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet


# Packages that only make sense in a browser build.
WEB_ONLY_PACKAGES: FrozenSet[str] = frozenset({
  'react-dom',
  'react-scripts',
  'web-vitals'
})


DEPENDENCY_MAP: Dict[str, str] = {
  'react': 'react-native',
  'react-dom': 'react-native',

  # Routing
  'react-router-dom': '@react-navigation/native',
  'react-router': '@react-navigation/native',

  # UI kits and icons
  'lucide-react': 'lucide-react-native',
  'react-icons': 'react-native-vector-icons',
  '@mui/material': 'react-native-paper',
  'antd': '@ant-design/react-native',

  # Styling
  'styled-components': 'styled-components/native',
  'classnames': 'clsx',

  # State management
  'redux': 'redux',
  '@reduxjs/toolkit': '@reduxjs/toolkit',
  'react-redux': 'react-redux',

  # Data fetching
  'axios': 'axios',
  'swr': 'react-query',

  # Feedback and motion
  'react-toastify': 'react-native-toast-message',
  'framer-motion': 'react-native-reanimated',
  'react-hot-toast': 'react-native-toast-message',
  'react-modal': 'react-native-modal',
  'react-responsive': 'react-native-responsive-screen',
  'react-player': 'react-native-video',

  # File handling
  'react-dropzone': 'react-native-document-picker',
  'file-saver': 'expo-file-system',

  # Charts
  'chart.js': 'react-native-chart-kit',
  'recharts': 'victory-native',

  # Testing
  '@testing-library/react': '@testing-library/react-native',
  '@testing-library/jest-dom': '@testing-library/jest-native',

  # Misc
  'uuid': 'react-native-uuid',
  'dotenv': 'react-native-dotenv'
}


BASELINE_DEPENDENCIES: Dict[str, str] = {
  'react': '18.2.0',
  'react-native': '0.73.6',

  '@react-navigation/native': '^6.1.17',
  '@react-navigation/stack': '^6.3.29',
  '@react-navigation/bottom-tabs': '^6.6.5',
  'react-native-screens': '~3.29.0',
  'react-native-safe-area-context': '4.8.2',
  'react-native-gesture-handler': '^2.14.0',
  'react-native-reanimated': '^3.10.1',

  'react-native-paper': '^5.12.3',
  'react-native-vector-icons': '^10.0.3',
  'styled-components': '^6.1.8',

  'react-redux': '^9.1.2',
  '@reduxjs/toolkit': '^2.2.1',

  'axios': '^1.6.8',

  'formik': '^2.4.5',
  'yup': '^1.3.3',

  'react-native-toast-message': '^2.2.0',
  'react-native-modal': '^13.0.1',
  'react-native-responsive-screen': '^1.4.2',
  'react-native-uuid': '^2.0.1',
  'react-native-dotenv': '^3.4.10',

  'react-native-video': '^6.0.0-alpha.2',

  'react-native-document-picker': '^9.1.1',
  'react-native-fs': '^2.20.0',

  'react-native-chart-kit': '^6.12.0',
  'victory-native': '^36.9.2',

  '@testing-library/react-native': '^12.5.0',
  '@testing-library/jest-native': '^5.4.2'
}


# Baseline entries that keep the version the source project declared.
SOURCE_VERSION_PREFERRED: FrozenSet[str] = frozenset({
  'react',
  'react-redux',
  '@reduxjs/toolkit',
  'axios',
  'formik',
  'yup'
})


TARGET_SCRIPTS: Dict[str, str] = {
  'start': 'react-native start',
  'android': 'react-native run-android',
  'ios': 'react-native run-ios'
}


DEV_DEPENDENCIES: Dict[str, str] = {
  '@babel/core': '^7.20.0',
  'metro-react-native-babel-preset': '0.77.0'
}


MAPPED_VERSION = 'latest'
DEFAULT_PACKAGE_NAME = 'converted-app'
DEFAULT_PACKAGE_VERSION = '0.0.1'


ELEMENT_MAP: Dict[str, str] = {
  'div': 'View',
  'section': 'View',
  'form': 'View',
  'ul': 'View',
  'ol': 'View',
  'li': 'View',
  'span': 'Text',
  'p': 'Text',
  'h1': 'Text',
  'h2': 'Text',
  'h3': 'Text',
  'h4': 'Text',
  'h5': 'Text',
  'h6': 'Text',
  'label': 'Text',
  'button': 'TouchableOpacity',
  'a': 'TouchableOpacity',
  'input': 'TextInput',
  'img': 'Image'
}


EVENT_MAP: Dict[str, str] = {
  'onClick': 'onPress',
  'onChange': 'onChangeText',
  'onSubmit': 'onPress'
}


WEB_API_MAP: Dict[str, str] = {
  'localStorage': '@react-native-async-storage/async-storage (AsyncStorage)',
  'window.location': 'navigation.navigate / Linking',
  'document': '(no DOM; use refs and component state)',
  'CSS animations': 'Animated API / react-native-reanimated'
}


@dataclass
class DependencyMapping:
  catalog: Dict[str, str]
  baseline: Dict[str, str]
  web_only: FrozenSet[str] = WEB_ONLY_PACKAGES

  def target_for(self, package: str) -> str:
    return self.catalog.get(package, package)

  def is_web_only(self, package: str) -> bool:
    return package in self.web_only


def default_dependency_mapping() -> DependencyMapping:
  return DependencyMapping(catalog=dict(DEPENDENCY_MAP), baseline=dict(BASELINE_DEPENDENCIES))
