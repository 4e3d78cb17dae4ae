#!/usr/bin/env python
# -*- coding: utf-8 -*-

import logging
import os

from pledge.common import path as pledge_path


class FakeAppDirs(object):
    def __init__(self, config_dir):
        self.user_config_dir = config_dir


class TestConfigDir(object):

    def test_missing_folder_is_created(self, monkeypatch, tmpdir):
        config_dir = str(tmpdir.join('pledge', 'config'))
        monkeypatch.setattr(pledge_path, '_appdirs', FakeAppDirs(config_dir))

        assert pledge_path.get_config_dir() == config_dir
        assert os.path.isdir(config_dir)

    def test_existing_folder(self, monkeypatch, tmpdir):
        monkeypatch.setattr(pledge_path, '_appdirs', FakeAppDirs(str(tmpdir)))

        assert pledge_path.get_config_dir() == str(tmpdir)

    def test_folder_creation_failure(self, monkeypatch, tmpdir, caplog):
        # A file prevents the creation of the folder.
        file_path = tmpdir.join('file')
        file_path.write('content')
        config_dir = str(file_path.join('config'))
        monkeypatch.setattr(pledge_path, '_appdirs', FakeAppDirs(config_dir))

        with caplog.at_level(logging.WARNING, logger='pledge'):
            assert pledge_path.get_config_dir() == config_dir
        assert 'Unable to create the missing folder' in caplog.text
