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
.. module:: jenkinsrest.plugins
    :platform: Unix, Windows
    :synopsis: Installed plugins, looked up by short or long name
'''

import re

import multi_key_dict

from jenkinsrest import endpoints
from jenkinsrest.pollable import Pollable

_VERSION_PARTS = re.compile(r'\d+|[a-zA-Z]+')


class PluginVersion(str):
    '''Plugin version string that compares by its numeric components.'''

    def _key(self):
        return tuple((0, int(part)) if part.isdigit() else (-1, part.lower())
                     for part in _VERSION_PARTS.findall(self))

    def _other_key(self, other):
        if not isinstance(other, PluginVersion):
            other = PluginVersion(other)
        return other._key()

    def __lt__(self, other):
        return self._key() < self._other_key(other)

    def __le__(self, other):
        return self._key() <= self._other_key(other)

    def __gt__(self, other):
        return self._key() > self._other_key(other)

    def __ge__(self, other):
        return self._key() >= self._other_key(other)

    def __eq__(self, other):
        return self._key() == self._other_key(other)

    def __ne__(self, other):
        return not self.__eq__(other)

    __hash__ = str.__hash__


class Plugin(dict):
    '''Dictionary of plugin data whose ``version`` compares numerically.

    When printing/dumping the data, the version is still a plain string.
    '''

    def __init__(self, *args, **kwargs):
        super(Plugin, self).__init__(*args, **kwargs)
        if self.get('version') is not None:
            self['version'] = self['version']

    def __setitem__(self, key, value):
        if key == 'version' and value is not None:
            value = PluginVersion(value)
        super(Plugin, self).__setitem__(key, value)


class Plugins(Pollable):
    '''The plugins installed on the server.

    After :meth:`poll`, plugins can be retrieved via either their short or
    their long name.
    '''

    kind = 'plugin manager'
    depth = 1

    def __init__(self, jenkins, depth=1, raw=None):
        super(Plugins, self).__init__(jenkins, endpoints.PLUGIN_MANAGER, raw)
        self.depth = depth
        self._plugins = self._index()

    def poll(self, depth=None, scope=None):
        status = super(Plugins, self).poll(depth=depth, scope=scope)
        self._plugins = self._index()
        return status

    def _index(self):
        plugins_data = multi_key_dict.multi_key_dict()
        for plugin_data in self._get('plugins', []):
            keys = (str(plugin_data['shortName']),
                    str(plugin_data['longName']))
            plugins_data[keys] = Plugin(**plugin_data)
        return plugins_data

    def count(self):
        return len(self._get('plugins', []))

    def contains(self, name):
        '''Return the plugin named ``name`` (short or long), or None.'''
        try:
            return self._plugins[name]
        except KeyError:
            return None

    def get_plugins(self):
        return [Plugin(**plugin_data)
                for plugin_data in self._get('plugins', [])]
