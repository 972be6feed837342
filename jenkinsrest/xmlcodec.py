#!/usr/bin/env python
# Software License Agreement (BSD License)
#
# Copyright (c) 2010, Willow Garage, Inc.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions
# are met:
#
#  * Redistributions of source code must retain the above copyright
#    notice, this list of conditions and the following disclaimer.
#  * Redistributions in binary form must reproduce the above
#    copyright notice, this list of conditions and the following
#    disclaimer in the documentation and/or other materials provided
#    with the distribution.
#  * Neither the name of Willow Garage, Inc. nor the names of its
#    contributors may be used to endorse or promote products derived
#    from this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# 'AS IS' AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT OWNER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

'''
.. module:: jenkinsrest.xmlcodec
    :platform: Unix, Windows
    :synopsis: Polymorphic XML codec for Jenkins configuration documents

Launchers, node properties and credentials are stored by Jenkins as XML
elements whose concrete type is named either by a ``class`` attribute
(launchers, private key sources) or by the element name itself (node
properties, credentials). Each known type is a :class:`Variant` with a
table of fields; anything else is kept verbatim as a :class:`RawVariant`
so that a decode/encode cycle never loses configuration.

Element names follow the server's own ``config.xml`` form, where ``_`` in
a Java class name is written as ``__``. Decoding accepts both spellings.
'''

import collections
import copy
import logging
import re
import xml.etree.ElementTree as ET

from jenkinsrest.exceptions import XMLCodecException

logger = logging.getLogger(__name__)

LAUNCHER_SSH = 'hudson.plugins.sshslaves.SSHLauncher'
LAUNCHER_COMMAND = 'hudson.slaves.CommandLauncher'
LAUNCHER_JNLP = 'hudson.slaves.JNLPLauncher'
RETENTION_ALWAYS = 'hudson.slaves.RetentionStrategy$Always'
CASE_INSENSITIVE_COMPARATOR = 'java.lang.String$CaseInsensitiveComparator'

Field = collections.namedtuple('Field', 'name tag kind default')

_XML_DECLARATION = re.compile(r'^\s*<\?xml[^>]*\?>')


def from_xml(text):
    '''Parse a configuration document.

    :param text: XML document, ``str`` or ``bytes``
    :returns: root ``ET.Element``
    :throws: :class:`XMLCodecException` when the document is malformed
    '''
    if isinstance(text, bytes):
        text = text.decode('utf-8')
    # expat refuses the XML 1.1 declaration newer servers write
    text = _XML_DECLARATION.sub('', text, count=1)
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        raise XMLCodecException('Could not parse XML document: %s' % e)


def to_xml(element):
    return ET.tostring(element, encoding='unicode')


def _normalize(name):
    return (name or '').replace('__', '_')


def _encode_field(elem, field, value):
    if value is None:
        return
    if field.kind == 'attr':
        elem.set(field.tag, value)
    elif isinstance(field.kind, VariantFamily):
        elem.append(field.kind.encode(value, field.tag))
    elif isinstance(field.kind, type):
        elem.append(value.to_element(field.tag))
    elif field.kind == 'bool':
        ET.SubElement(elem, field.tag).text = 'true' if value else 'false'
    else:
        ET.SubElement(elem, field.tag).text = str(value)


def _decode_field(elem, field):
    if field.kind == 'attr':
        return elem.get(field.tag, field.default)
    child = elem.find(field.tag)
    if child is None:
        return field.default
    if isinstance(field.kind, VariantFamily):
        return field.kind.decode(child)
    if isinstance(field.kind, type):
        return field.kind.from_element(child)
    text = child.text or ''
    if field.kind == 'bool':
        return text.strip().lower() == 'true'
    if field.kind == 'int':
        try:
            return int(text.strip()) if text.strip() else field.default
        except ValueError:
            raise XMLCodecException('<%s> is not an integer: %r'
                                    % (field.tag, text))
    return text


class Variant(object):
    '''A configuration element with a fixed set of fields.

    Subclasses set ``TAG`` (element name written on encode), ``CLASS``
    (Java class the element stands for) and ``FIELDS``. When
    ``CLASS_ATTRIBUTE`` is true the class is also written as the ``class``
    attribute of the element.
    '''

    TAG = None
    CLASS = None
    ALIASES = ()
    CLASS_ATTRIBUTE = False
    FIELDS = ()

    def __init__(self, **kwargs):
        for field in self.FIELDS:
            setattr(self, field.name, kwargs.pop(field.name, field.default))
        if kwargs:
            raise TypeError('%s got unexpected fields: %s'
                            % (type(self).__name__, ', '.join(sorted(kwargs))))

    def get_class(self):
        return self.CLASS

    def _values(self):
        return tuple(getattr(self, field.name) for field in self.FIELDS)

    def __eq__(self, other):
        return type(self) is type(other) and self._values() == other._values()

    def __repr__(self):
        return '%s(%s)' % (type(self).__name__, ', '.join(
            '%s=%r' % (field.name, getattr(self, field.name))
            for field in self.FIELDS))

    def to_element(self, tag=None):
        elem = ET.Element(tag or self.TAG)
        if self.CLASS_ATTRIBUTE and self.CLASS:
            elem.set('class', self.CLASS)
        self._encode_body(elem)
        return elem

    def _encode_body(self, elem):
        for field in self.FIELDS:
            _encode_field(elem, field, getattr(self, field.name))

    @classmethod
    def from_element(cls, elem):
        return cls(**cls._decode_body(elem))

    @classmethod
    def _decode_body(cls, elem):
        return dict((field.name, _decode_field(elem, field))
                    for field in cls.FIELDS)

    def to_json(self):
        '''Return the structured-form representation used by create forms.'''
        data = {}
        if self.CLASS:
            data['stapler-class'] = self.CLASS
            data['$class'] = self.CLASS
        for field in self.FIELDS:
            value = getattr(self, field.name)
            if isinstance(value, (Variant, RawVariant)):
                value = value.to_json()
            if value is not None:
                data[field.tag] = value
        return data


class RawVariant(object):
    '''Configuration element of a type without a dedicated class.

    :param tag: element name, ``str``
    :param class_name: ``class`` attribute, if any, ``str``
    :param inner_xml: serialized children of the element, ``str``
    :param attrib: other attributes of the element, ``dict``
    '''

    def __init__(self, tag, class_name=None, inner_xml='', attrib=None):
        self.tag = tag
        self.class_name = class_name
        self.inner_xml = inner_xml
        self.attrib = dict(attrib or {})

    def get_class(self):
        return self.class_name or _normalize(self.tag)

    def __eq__(self, other):
        return (isinstance(other, RawVariant) and
                (self.tag, self.class_name, self.inner_xml, self.attrib) ==
                (other.tag, other.class_name, other.inner_xml, other.attrib))

    def __repr__(self):
        return 'RawVariant(tag=%r, class_name=%r, inner_xml=%r)' % (
            self.tag, self.class_name, self.inner_xml)

    def to_element(self, tag=None):
        elem = ET.Element(tag or self.tag, dict(self.attrib))
        if self.class_name:
            elem.set('class', self.class_name)
        try:
            wrapper = ET.fromstring('<raw>%s</raw>' % self.inner_xml)
        except ET.ParseError as e:
            raise XMLCodecException('Invalid inner XML for <%s>: %s'
                                    % (self.tag, e))
        elem.text = wrapper.text
        elem.extend(list(wrapper))
        return elem

    @classmethod
    def from_element(cls, elem):
        attrib = dict(elem.attrib)
        class_name = attrib.pop('class', None)
        inner_xml = (elem.text or '') + ''.join(
            ET.tostring(child, encoding='unicode') for child in elem)
        return cls(elem.tag, class_name, inner_xml, attrib)

    def to_json(self):
        data = {}
        if self.class_name:
            data['stapler-class'] = self.class_name
            data['$class'] = self.class_name
        return data


class VariantFamily(object):
    '''Dispatch table from a type discriminator to a :class:`Variant`.

    :param name: family name used in log and error messages, ``str``
    :param variants: known variant classes, ``list``
    :param class_attribute: discriminate on the ``class`` attribute instead
        of the element name, ``bool``
    '''

    def __init__(self, name, variants, class_attribute=False):
        self.name = name
        self.class_attribute = class_attribute
        self._variants = {}
        for variant in variants:
            for key in (variant.CLASS, variant.TAG) + variant.ALIASES:
                if key:
                    self._variants[_normalize(key)] = variant

    def decode(self, elem):
        if self.class_attribute:
            key = elem.get('class')
        else:
            key = elem.tag
        variant = self._variants.get(_normalize(key))
        if variant is None:
            logger.debug('Keeping unknown %s [%s] as raw XML', self.name, key)
            return RawVariant.from_element(elem)
        return variant.from_element(elem)

    def encode(self, value, tag=None):
        return value.to_element(tag)


# launchers

class WorkDirSettings(Variant):
    TAG = 'workDirSettings'
    FIELDS = (
        Field('disabled', 'disabled', 'bool', False),
        Field('internal_dir', 'internalDir', 'str', 'remoting'),
        Field('fail_if_work_dir_is_missing', 'failIfWorkDirIsMissing',
              'bool', False),
    )


class SSHLauncher(Variant):
    TAG = 'launcher'
    CLASS = LAUNCHER_SSH
    CLASS_ATTRIBUTE = True
    FIELDS = (
        Field('host', 'host', 'str', ''),
        Field('port', 'port', 'int', 22),
        Field('credentials_id', 'credentialsId', 'str', ''),
        Field('launch_timeout_seconds', 'launchTimeoutSeconds', 'int', 60),
        Field('max_num_retries', 'maxNumRetries', 'int', 0),
        Field('retry_wait_time', 'retryWaitTime', 'int', 0),
        Field('jvm_options', 'jvmOptions', 'str', ''),
        Field('java_path', 'javaPath', 'str', ''),
        Field('prefix_start_slave_cmd', 'prefixStartSlaveCmd', 'str', ''),
        Field('suffix_start_slave_cmd', 'suffixStartSlaveCmd', 'str', ''),
    )


class JNLPLauncher(Variant):
    TAG = 'launcher'
    CLASS = LAUNCHER_JNLP
    CLASS_ATTRIBUTE = True
    FIELDS = (
        Field('work_dir_settings', 'workDirSettings', WorkDirSettings, None),
        Field('web_socket', 'webSocket', 'bool', False),
    )


class CommandLauncher(Variant):
    TAG = 'launcher'
    CLASS = LAUNCHER_COMMAND
    CLASS_ATTRIBUTE = True
    FIELDS = (
        Field('agent_command', 'agentCommand', 'str', ''),
    )


def default_ssh_launcher():
    '''The SSH launcher Jenkins fills out when no options are given.'''
    return SSHLauncher()


def default_jnlp_launcher():
    '''The JNLP launcher Jenkins fills out when no options are given.'''
    return JNLPLauncher(work_dir_settings=WorkDirSettings())


LAUNCHERS = VariantFamily('launcher', [SSHLauncher, JNLPLauncher,
                                       CommandLauncher],
                          class_attribute=True)


def encode_launcher(launcher, class_name=None):
    '''Encode a launcher as a ``<launcher class="...">`` element.

    A launcher of ``None`` gives an empty element carrying only the class.
    '''
    if launcher is None:
        elem = ET.Element('launcher')
        if class_name:
            elem.set('class', class_name)
        return elem
    return LAUNCHERS.encode(launcher, 'launcher')


def decode_launcher(elem):
    return LAUNCHERS.decode(elem)


# node properties

class EnvironmentVariablesNodeProperty(Variant):
    '''Environment variables set on a node.

    Jenkins stores them as a serialized case-insensitive ``TreeMap``.
    '''

    TAG = CLASS = 'hudson.slaves.EnvironmentVariablesNodeProperty'

    def __init__(self, env_vars=None):
        self.env_vars = dict(env_vars or {})

    def _values(self):
        return (self.env_vars,)

    def __repr__(self):
        return 'EnvironmentVariablesNodeProperty(env_vars=%r)' % self.env_vars

    def _encode_body(self, elem):
        env = ET.SubElement(elem, 'envVars', {'serialization': 'custom'})
        ET.SubElement(env, 'unserializable-parents')
        tree = ET.SubElement(env, 'tree-map')
        default = ET.SubElement(tree, 'default')
        ET.SubElement(default, 'comparator',
                      {'class': CASE_INSENSITIVE_COMPARATOR})
        ET.SubElement(tree, 'int').text = str(len(self.env_vars))
        for key in sorted(self.env_vars, key=lambda k: (k.lower(), k)):
            ET.SubElement(tree, 'string').text = key
            ET.SubElement(tree, 'string').text = self.env_vars[key]

    @classmethod
    def _decode_body(cls, elem):
        env = elem.find('envVars')
        if env is None:
            return {'env_vars': {}}
        tree = env.find('tree-map')
        if tree is None:
            tree = env
        strings = [s.text or '' for s in tree.findall('string')]
        return {'env_vars': dict(zip(strings[0::2], strings[1::2]))}


class ToolLocation(Variant):
    TAG = 'hudson.tools.ToolLocationNodeProperty_-ToolLocation'
    FIELDS = (
        Field('tool_type', 'type', 'str', ''),
        Field('name', 'name', 'str', ''),
        Field('home', 'home', 'str', ''),
    )


class ToolLocationNodeProperty(Variant):
    TAG = CLASS = 'hudson.tools.ToolLocationNodeProperty'

    def __init__(self, locations=None):
        self.locations = list(locations or [])

    @classmethod
    def from_mapping(cls, locations):
        '''Build the property from ``{'type:name': home}``.

        The tool name defaults to ``Default`` when the key has no ``:``.
        '''
        result = []
        for key, home in locations.items():
            tool_type, _, name = key.partition(':')
            result.append(ToolLocation(tool_type=tool_type,
                                       name=name or 'Default', home=home))
        return cls(result)

    def _values(self):
        return (self.locations,)

    def __repr__(self):
        return 'ToolLocationNodeProperty(locations=%r)' % self.locations

    def _encode_body(self, elem):
        locations = ET.SubElement(elem, 'locations')
        for location in self.locations:
            locations.append(location.to_element())

    @classmethod
    def _decode_body(cls, elem):
        locations = elem.find('locations')
        if locations is None:
            return {'locations': []}
        return {'locations': [ToolLocation.from_element(child)
                              for child in locations]}


class DiskSpaceMonitorNodeProperty(Variant):
    '''Free space thresholds, given as sizes such as ``1GiB``.'''

    TAG = 'hudson.node__monitors.DiskSpaceMonitorNodeProperty'
    CLASS = 'hudson.node_monitors.DiskSpaceMonitorNodeProperty'
    FIELDS = (
        Field('free_disk_space_threshold', 'freeDiskSpaceThreshold',
              'str', ''),
        Field('free_temp_space_threshold', 'freeTempSpaceThreshold',
              'str', ''),
        Field('free_disk_space_warning_threshold',
              'freeDiskSpaceWarningThreshold', 'str', None),
        Field('free_temp_space_warning_threshold',
              'freeTempSpaceWarningThreshold', 'str', None),
    )


class WorkspaceCleanupNodeProperty(Variant):
    '''Disables deferred workspace wipeout (ws-cleanup plugin).'''

    TAG = 'hudson.plugins.ws__cleanup.DisableDeferredWipeoutNodeProperty'
    CLASS = 'hudson.plugins.ws_cleanup.DisableDeferredWipeoutNodeProperty'
    ALIASES = ('hudson.slaves.WorkspaceCleanupNodeProperty',)
    FIELDS = (
        Field('plugin', 'plugin', 'attr', None),
    )


NODE_PROPERTIES = VariantFamily('node property', [
    EnvironmentVariablesNodeProperty,
    ToolLocationNodeProperty,
    DiskSpaceMonitorNodeProperty,
    WorkspaceCleanupNodeProperty,
])


def encode_node_properties(properties):
    '''Encode a list of node properties as ``<nodeProperties>``.

    :throws: :class:`XMLCodecException` naming the index and class of the
        first property that cannot be encoded
    '''
    elem = ET.Element('nodeProperties')
    for index, prop in enumerate(properties or []):
        try:
            elem.append(NODE_PROPERTIES.encode(prop))
        except (AttributeError, TypeError, ValueError, XMLCodecException) as e:
            class_name = getattr(prop, 'get_class', lambda: type(prop).__name__)()
            raise XMLCodecException(
                'failed to encode node property at index %d (%s): %s'
                % (index, class_name, e))
    return elem


def decode_node_properties(elem):
    if elem is None:
        return []
    return [NODE_PROPERTIES.decode(child) for child in elem]


# credentials

class DirectEntryPrivateKey(Variant):
    TAG = 'privateKeySource'
    CLASS = ('com.cloudbees.jenkins.plugins.sshcredentials.impl.'
             'BasicSSHUserPrivateKey$DirectEntryPrivateKeySource')
    CLASS_ATTRIBUTE = True
    FIELDS = (
        Field('private_key', 'privateKey', 'str', ''),
    )


class FileOnMasterPrivateKey(Variant):
    TAG = 'privateKeySource'
    CLASS = ('com.cloudbees.jenkins.plugins.sshcredentials.impl.'
             'BasicSSHUserPrivateKey$FileOnMasterPrivateKeySource')
    CLASS_ATTRIBUTE = True
    FIELDS = (
        Field('private_key_file', 'privateKeyFile', 'str', ''),
    )


KEY_SOURCES = VariantFamily('private key source', [
    DirectEntryPrivateKey,
    FileOnMasterPrivateKey,
], class_attribute=True)


class UsernameCredentials(Variant):
    TAG = CLASS = ('com.cloudbees.plugins.credentials.impl.'
                   'UsernamePasswordCredentialsImpl')
    FIELDS = (
        Field('id', 'id', 'str', ''),
        Field('scope', 'scope', 'str', 'GLOBAL'),
        Field('description', 'description', 'str', ''),
        Field('username', 'username', 'str', ''),
        Field('password', 'password', 'str', ''),
    )


class StringCredentials(Variant):
    TAG = CLASS = ('org.jenkinsci.plugins.plaincredentials.impl.'
                   'StringCredentialsImpl')
    FIELDS = (
        Field('id', 'id', 'str', ''),
        Field('scope', 'scope', 'str', 'GLOBAL'),
        Field('description', 'description', 'str', ''),
        Field('secret', 'secret', 'str', ''),
    )


class FileCredentials(Variant):
    '''Secret file; ``secret_bytes`` holds the base64 encoded content.'''

    TAG = CLASS = ('org.jenkinsci.plugins.plaincredentials.impl.'
                   'FileCredentialsImpl')
    FIELDS = (
        Field('id', 'id', 'str', ''),
        Field('scope', 'scope', 'str', 'GLOBAL'),
        Field('description', 'description', 'str', ''),
        Field('file_name', 'fileName', 'str', ''),
        Field('secret_bytes', 'secretBytes', 'str', ''),
    )


class SSHCredentials(Variant):
    TAG = CLASS = ('com.cloudbees.jenkins.plugins.sshcredentials.impl.'
                   'BasicSSHUserPrivateKey')
    FIELDS = (
        Field('id', 'id', 'str', ''),
        Field('scope', 'scope', 'str', 'GLOBAL'),
        Field('username', 'username', 'str', ''),
        Field('description', 'description', 'str', None),
        Field('private_key_source', 'privateKeySource', KEY_SOURCES, None),
        Field('passphrase', 'passphrase', 'str', None),
    )


class DockerServerCredentials(Variant):
    TAG = CLASS = ('org.jenkinsci.plugins.docker.commons.credentials.'
                   'DockerServerCredentials')
    FIELDS = (
        Field('id', 'id', 'str', ''),
        Field('scope', 'scope', 'str', 'GLOBAL'),
        Field('username', 'username', 'str', ''),
        Field('description', 'description', 'str', None),
        Field('client_key', 'clientKey', 'str', ''),
        Field('client_certificate', 'clientCertificate', 'str', ''),
        Field('server_ca_certificate', 'serverCaCertificate', 'str', ''),
    )


CREDENTIALS = VariantFamily('credentials', [
    UsernameCredentials,
    StringCredentials,
    FileCredentials,
    SSHCredentials,
    DockerServerCredentials,
])


def encode_credentials(credentials):
    return CREDENTIALS.encode(credentials)


def decode_credentials(document):
    '''Decode credentials from an ``ET.Element`` or an XML document.'''
    if not ET.iselement(document):
        document = from_xml(document)
    return CREDENTIALS.decode(document)


# agents

class NodeConfig(object):
    '''The ``config.xml`` document of a permanent agent.

    :param name: node name, ``str``
    :param description: node description, ``str``
    :param remote_fs: remote root directory, ``str``
    :param num_executors: number of executors, ``int``
    :param mode: ``NORMAL`` or ``EXCLUSIVE``, ``str``
    :param label: space separated labels, ``str``
    :param launcher: launcher variant, or None to omit the element
    :param retention_strategy: retention strategy element, defaults to
        ``RetentionStrategy$Always``
    :param node_properties: node property variants, ``list``
    :param extra: other children of the document (ex.: ``<userId>``), kept
        as :class:`RawVariant` and written back after the known ones
    '''

    TAG = 'slave'
    KNOWN_TAGS = ('name', 'description', 'remoteFS', 'numExecutors', 'mode',
                  'retentionStrategy', 'launcher', 'label', 'nodeProperties')
    _ATTRIBUTES = ('name', 'description', 'remote_fs', 'num_executors',
                   'mode', 'label', 'launcher', 'retention_strategy',
                   'node_properties', 'extra')

    def __init__(self, name, description='', remote_fs='/var/lib/jenkins',
                 num_executors=1, mode='NORMAL', label='', launcher=None,
                 retention_strategy=None, node_properties=None, extra=None):
        self.name = name
        self.description = description
        self.remote_fs = remote_fs
        self.num_executors = num_executors
        self.mode = mode
        self.label = label
        self.launcher = launcher
        if retention_strategy is None:
            retention_strategy = RawVariant('retentionStrategy',
                                            RETENTION_ALWAYS)
        self.retention_strategy = retention_strategy
        self.node_properties = list(node_properties or [])
        self.extra = list(extra or [])

    def __eq__(self, other):
        return (isinstance(other, NodeConfig) and
                all(getattr(self, a) == getattr(other, a)
                    for a in self._ATTRIBUTES))

    def __repr__(self):
        return 'NodeConfig(%s)' % ', '.join(
            '%s=%r' % (a, getattr(self, a)) for a in self._ATTRIBUTES)

    def to_element(self):
        elem = ET.Element(self.TAG)
        ET.SubElement(elem, 'name').text = self.name
        ET.SubElement(elem, 'description').text = self.description
        ET.SubElement(elem, 'remoteFS').text = self.remote_fs
        ET.SubElement(elem, 'numExecutors').text = str(self.num_executors)
        ET.SubElement(elem, 'mode').text = self.mode
        elem.append(self.retention_strategy.to_element('retentionStrategy'))
        if self.launcher is not None:
            elem.append(encode_launcher(self.launcher))
        ET.SubElement(elem, 'label').text = self.label
        elem.append(encode_node_properties(self.node_properties))
        for variant in self.extra:
            elem.append(variant.to_element())
        return elem

    def to_xml(self):
        return to_xml(self.to_element())

    @classmethod
    def from_element(cls, elem):
        def text(tag, default=''):
            child = elem.find(tag)
            if child is None or child.text is None:
                return default
            return child.text

        try:
            num_executors = int(text('numExecutors', '1').strip())
        except ValueError:
            raise XMLCodecException('<numExecutors> is not an integer')

        launcher = elem.find('launcher')
        retention = elem.find('retentionStrategy')
        return cls(
            name=text('name'),
            description=text('description'),
            remote_fs=text('remoteFS'),
            num_executors=num_executors,
            mode=text('mode', 'NORMAL'),
            label=text('label'),
            launcher=None if launcher is None else decode_launcher(launcher),
            retention_strategy=(None if retention is None
                                else RawVariant.from_element(retention)),
            node_properties=decode_node_properties(
                elem.find('nodeProperties')),
            extra=[RawVariant.from_element(child) for child in elem
                   if child.tag not in cls.KNOWN_TAGS],
        )

    @classmethod
    def from_xml(cls, document):
        return cls.from_element(from_xml(document))

    def copy(self):
        return copy.deepcopy(self)
