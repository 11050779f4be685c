"""Translation backends: Google, Bing, Yandex and Apertium."""