"""Content providers: clock, coindesk, image, sysinfo, debug and mediaplayer."""